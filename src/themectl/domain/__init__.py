"""Domain layer — naming rules, path table, theme metadata, asset values.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
