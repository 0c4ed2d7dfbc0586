"""Domain layer — targets, build modes, library kinds.

This layer depends only on stdlib and pydantic.
It must never import from services, commands, output, or config.
"""
