"""
Core configuration and shared utilities for RagSearch.

This package contains the unified configuration system used by the registry
and the services.
"""

__all__ = ["config"]
