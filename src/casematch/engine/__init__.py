"""Registry configuration.

This package holds the settings shared by search, scanning, intake and
reconciliation.
"""

from casematch.engine.config import RegistryConfig

__all__ = ["RegistryConfig"]
