# src/lifeops_gateway/services/__init__.py
"""Outbound integration services for the LifeOps gateway.

Submodules are imported directly (``lifeops_gateway.services.gateway`` etc.);
the repositories depend on ``services.crypto``, so nothing is re-exported here.
"""
