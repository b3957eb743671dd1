"""
Exception taxonomy for the perception pipeline.

Input errors surface at the call (or constructor) that received the bad
input. Security violations come from the validator and must reach the
caller unchanged. Algorithm failures are wrapped exactly once, by the
fusion coordinator.
"""
from typing import Optional


class PerceptionError(Exception):
    """Base class for every error raised by the pipeline."""


class InvalidInputError(PerceptionError, ValueError):
    """Structurally invalid input (bad timestamp, empty id, length mismatch...)."""


class InvalidDetectionInputError(InvalidInputError):
    """Detection was asked to run on a missing or wrong-typed input."""


class SecurityViolationError(PerceptionError):
    """
    Raised by the security validator when an input matches an attack pattern
    or exceeds the payload limit.

    Attributes:
        threat: Short machine-readable tag ('sql_injection', 'xss',
            'path_traversal', 'oversized_payload', 'negative_size')
    """

    def __init__(self, message: str, threat: str):
        super().__init__(message)
        self.threat = threat


class FusionFailedError(PerceptionError, RuntimeError):
    """An injected fusion algorithm raised while fusing a batch."""

    def __init__(self, message: str, algorithm_name: Optional[str] = None):
        super().__init__(message)
        self.algorithm_name = algorithm_name


class ConfigurationError(PerceptionError):
    """Invalid configuration or no applicable fusion algorithm."""
