# src/lifeops_gateway/__init__.py
"""LifeOps integration gateway: CI/CD providers and notification dispatch."""

__version__ = "0.1.0"
