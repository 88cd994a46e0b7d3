"""
RegistryAccord client package.
"""

from racli.client.client import RegistryAccordClient

__all__ = ["RegistryAccordClient"]
