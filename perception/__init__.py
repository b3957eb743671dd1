"""
Perception module - sensor fusion and object detection core.

Exports:
    - SensorReading / LidarReading / CameraReading: Immutable sensor inputs
    - FusionOutcome, DetectedObject: Frozen stage outputs
    - FusionAlgorithm: Abstract base for all fusion strategies
    - FusionCoordinator: Time synchronization + strategy dispatch
    - DetectionEngine: Confidence-filtered detection

The orchestrator lives in perception.perception_pipeline and is imported
from there, since it depends on the security package.
"""

# Data model
from perception.sensor_data import (
    SensorKind,
    SensorReading,
    LidarReading,
    CameraReading,
    ImageStatistics,
)
from perception.types import (
    FusionOutcome,
    ObjectClass,
    Position3D,
    DetectedObject,
    PerceptionResult,
)
from perception.errors import (
    PerceptionError,
    InvalidInputError,
    InvalidDetectionInputError,
    SecurityViolationError,
    FusionFailedError,
    ConfigurationError,
)

# Fusion strategies
from perception.base import FusionAlgorithm
from perception.fusion_algorithms import (
    KalmanFilterFusion,
    ExtendedKalmanFilterFusion,
    ParticleFilterFusion,
    WeightedAverageFusion,
    MockFusionAlgorithm,
)
from perception.algorithm_selector import (
    FusionAlgorithmSelector,
    AdaptiveFusion,
    create_algorithm,
    default_selector,
)

# Pipeline stages
from perception.fusion_coordinator import FusionCoordinator
from perception.detector import DetectionEngine
from perception.config import PerceptionConfig, load_config

__all__ = [
    # Data model
    'SensorKind',
    'SensorReading',
    'LidarReading',
    'CameraReading',
    'ImageStatistics',
    'FusionOutcome',
    'ObjectClass',
    'Position3D',
    'DetectedObject',
    'PerceptionResult',

    # Errors
    'PerceptionError',
    'InvalidInputError',
    'InvalidDetectionInputError',
    'SecurityViolationError',
    'FusionFailedError',
    'ConfigurationError',

    # Strategies
    'FusionAlgorithm',
    'KalmanFilterFusion',
    'ExtendedKalmanFilterFusion',
    'ParticleFilterFusion',
    'WeightedAverageFusion',
    'MockFusionAlgorithm',
    'FusionAlgorithmSelector',
    'AdaptiveFusion',
    'create_algorithm',
    'default_selector',

    # Stages
    'FusionCoordinator',
    'DetectionEngine',
    'PerceptionConfig',
    'load_config',
]
