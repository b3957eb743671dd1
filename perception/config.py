"""
Pipeline configuration loaded from YAML.
"""
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

import yaml

from perception.detector import DETECTION_THRESHOLD
from perception.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "perception_config.yaml"

ALGORITHM_KEYS = ('auto', 'kalman', 'extended_kalman', 'particle', 'weighted_average')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class PerceptionConfig:
    """Tunable pipeline parameters."""

    # Fusion
    sync_window_ms: int = 50
    algorithm: str = 'auto'

    # Detection
    detection_threshold: float = DETECTION_THRESHOLD
    seed: Optional[int] = None

    # Frame-level concurrency
    max_workers: int = 4

    log_level: str = 'INFO'

    def __post_init__(self):
        if not isinstance(self.sync_window_ms, int) or self.sync_window_ms < 0:
            raise ConfigurationError(
                f"sync_window_ms must be a non-negative integer, got {self.sync_window_ms}"
            )

        if self.algorithm not in ALGORITHM_KEYS:
            raise ConfigurationError(
                f"algorithm must be one of {ALGORITHM_KEYS}, got '{self.algorithm}'"
            )

        if not (DETECTION_THRESHOLD <= self.detection_threshold < 1.0):
            raise ConfigurationError(
                f"detection_threshold must be in [{DETECTION_THRESHOLD}, 1), "
                f"got {self.detection_threshold}"
            )

        if self.seed is not None and not isinstance(self.seed, int):
            raise ConfigurationError(f"seed must be an integer or null, got {self.seed}")

        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {LOG_LEVELS}")


def load_config(config_path: Union[str, Path, None] = None) -> PerceptionConfig:
    """
    Load pipeline configuration

    Args:
        config_path: Path to a perception_config.yaml; the bundled default
            when omitted

    Returns:
        PerceptionConfig with file values over dataclass defaults

    Raises:
        ConfigurationError: missing file, malformed YAML or unknown keys
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML configuration file: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration file must contain a YAML mapping")

    section = raw.get('perception', raw) or {}
    if not isinstance(section, dict):
        raise ConfigurationError("'perception' section must be a YAML mapping")

    known = {f.name for f in fields(PerceptionConfig)}
    unknown = set(section) - known
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

    return PerceptionConfig(**section)
