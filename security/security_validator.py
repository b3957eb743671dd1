"""
Security validator for pipeline inputs.
Rejects injection patterns in sensor ids and oversized payloads before
readings reach the fusion stage.
"""

import logging
import re
from typing import Optional, Tuple

from perception.errors import InvalidInputError, SecurityViolationError
from perception.log_utils import resolve_logger, sanitize_for_log
from perception.sensor_data import SensorReading

MAX_DATA_SIZE = 100_000_000  # 100MB

SQL_INJECTION_PATTERNS = (
    "drop table", "delete from", "insert into", "update ",
    "union select", "exec(", "execute(", "--", ";--", "/*", "*/",
)

XSS_PATTERNS = (
    "<script", "javascript:", "onerror=", "onload=",
    "<iframe", "<object", "<embed",
)

PATH_TRAVERSAL_PATTERNS = ("../", "..\\", "%2e%2e", "%252e")

_TAG = re.compile(r"<[^>]*>")
_SCRIPT_WORD = re.compile(r"script", re.IGNORECASE)


class SecurityValidator:
    """
    Validates identifiers and payload sizes.

    Checks raise; nothing is silently downgraded, so callers can tell an
    attack apart from an ordinary processing error.
    """

    def __init__(self, max_data_size: int = MAX_DATA_SIZE,
                 logger: Optional[logging.Logger] = None):
        self.max_data_size = max_data_size
        self.logger = resolve_logger(logger, __name__)

    def validate_sensor_id(self, sensor_id: str) -> None:
        """
        Validate sensor ID for security threats

        Raises:
            InvalidInputError: empty or non-string id
            SecurityViolationError: SQL injection, XSS or path traversal pattern
        """
        if not isinstance(sensor_id, str) or not sensor_id.strip():
            self.logger.warning("Security: Empty sensor ID detected")
            raise InvalidInputError("sensor_id must be a non-empty string")

        threat = self.find_threat(sensor_id)
        if threat is not None:
            self.logger.error("Security: %s attempt detected in sensor ID: %s",
                              threat, sanitize_for_log(sensor_id))
            raise SecurityViolationError(
                f"{threat} pattern detected in sensor ID", threat=threat
            )

    def validate_data_size(self, data_size: int) -> None:
        """
        Validate data size to prevent memory exhaustion

        Raises:
            SecurityViolationError: negative size or size above the limit
        """
        if data_size < 0:
            self.logger.warning("Security: Negative data size detected")
            raise SecurityViolationError(
                f"Negative data size: {data_size}", threat="negative_size"
            )

        if data_size > self.max_data_size:
            self.logger.error("Security: Data size exceeds limit: %d bytes (max: %d)",
                              data_size, self.max_data_size)
            raise SecurityViolationError(
                f"Data size {data_size} exceeds limit {self.max_data_size}",
                threat="oversized_payload",
            )

    def validate_reading(self, reading: SensorReading) -> None:
        """Run every check that applies to one reading."""
        self.validate_sensor_id(reading.sensor_id)
        self.validate_data_size(reading.data_size())

    def is_safe_sensor_id(self, sensor_id: str) -> bool:
        """Non-raising form of validate_sensor_id."""
        is_safe, _ = self.check_sensor_id(sensor_id)
        return is_safe

    def check_sensor_id(self, sensor_id: str) -> Tuple[bool, str]:
        """
        Validate without raising

        Returns:
            (is_safe, reason_if_unsafe)
        """
        if not isinstance(sensor_id, str) or not sensor_id.strip():
            return False, "empty"

        threat = self.find_threat(sensor_id)
        if threat is not None:
            return False, threat

        return True, "ok"

    @staticmethod
    def find_threat(text: str) -> Optional[str]:
        """Name of the first attack pattern found in text, or None."""
        lowered = text.lower()

        if any(pattern in lowered for pattern in SQL_INJECTION_PATTERNS):
            return "sql_injection"

        if any(pattern in lowered for pattern in XSS_PATTERNS):
            return "xss"

        if any(pattern in lowered for pattern in PATH_TRAVERSAL_PATTERNS):
            return "path_traversal"

        return None

    @staticmethod
    def sanitize_input(text: Optional[str]) -> str:
        """Strip markup tags and the word 'script'."""
        if text is None:
            return ""
        return _SCRIPT_WORD.sub("", _TAG.sub("", text))
