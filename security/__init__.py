"""
Security module - input validation gate in front of the pipeline.
"""

from security.security_validator import SecurityValidator, MAX_DATA_SIZE

__all__ = [
    'SecurityValidator',
    'MAX_DATA_SIZE',
]
