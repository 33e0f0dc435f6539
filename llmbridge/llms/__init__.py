"""Wire schemas and converters for the structured and flat chat formats."""
