"""Domain layer — document model, parsing, validation and query evaluation.

This layer depends only on stdlib, pydantic and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
