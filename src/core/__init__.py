"""Core of ArtVaani's AI flows: domain models, prompts, contracts and services."""
