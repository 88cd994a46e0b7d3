# Common utilities
from racli.common.crypto import SigningService as SigningService
from racli.common.logging_utils import setup_logger as setup_logger
from racli.common.mixins import Configurable as Configurable

__all__ = ["Configurable", "SigningService", "setup_logger"]
