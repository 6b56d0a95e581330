"""Domain layer — markers, descriptors, and rules.

This layer depends only on stdlib and pydantic.
It must never import from services, plugins, commands, or config.
"""
