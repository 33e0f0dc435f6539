"""OpenAI chat completions wire schemas."""
