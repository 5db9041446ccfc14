"""
RHE SSO: Logging

Logging structuré JSON avec masquage des secrets, utilisé par le transport
API et le broker de session.
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
)
from .sensitive_masker import MASK_VALUE, SensitiveMasker
from .structured_logger import MissingRequiredFieldError, StructuredLogger

__all__ = [
    # Enums
    "LogLevel",
    # Dataclasses
    "LogEntry",
    "LogConfig",
    # Interfaces
    "IStructuredLogger",
    # Implementations
    "SensitiveMasker",
    "StructuredLogger",
    "MASK_VALUE",
    # Exceptions
    "MissingRequiredFieldError",
]
