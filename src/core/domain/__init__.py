"""Domain models and entities.

- Request/response records of the AI flows (Pydantic v2).
- Prompt templates and the validation gates around the model call.
- The domain knows nothing about HTTP, the CLI or provider SDKs.
"""
