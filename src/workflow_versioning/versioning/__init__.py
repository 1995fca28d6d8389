"""Versioning domain: models, diffing, classification and the service."""
