"""Domain layer — events, tracks, and layout geometry.

This layer depends only on stdlib and NetworkX.
It must never import from services, infrastructure, commands, or config.
"""
