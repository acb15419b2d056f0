"""Configuration — section models, settings sources, discovery, logging."""
