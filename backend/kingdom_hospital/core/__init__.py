# Core package initialization
# Cross-cutting concerns shared by every layer: configuration, logging,
# error categories, service results and validation helpers.

from . import config, exceptions, result, validation

__all__ = [
    "config",
    "exceptions",
    "result",
    "validation",
]
