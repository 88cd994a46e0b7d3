# RegistryAccord CLI

from racli.client.client import RegistryAccordClient
from racli.common.crypto import SigningService

__all__ = [
    "RegistryAccordClient",
    "SigningService",
]
