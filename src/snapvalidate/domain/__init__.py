"""Domain layer: results, errors, regex safety, and format rules.

This layer depends only on stdlib and pydantic.
It must never import from services, commands, output, or config.
"""
