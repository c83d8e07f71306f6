"""Adapters: hosted model (OpenAI-compatible), geocoding, HTTP and exporters."""
