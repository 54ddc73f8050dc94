"""Shared helpers: encrypted columns, upload validation, OpenAI calls, serialization."""
