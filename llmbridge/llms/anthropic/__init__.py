"""Anthropic Messages API wire schemas."""
