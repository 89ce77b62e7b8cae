"""Adapters to the outside world (HTTP, OpenAI SDK)."""
