"""Chat and Anthropic data types, format conversion, errors and audit-log helpers for an LLM gateway."""

__version__ = "0.1.0"