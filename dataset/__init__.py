"""
Dataset module - producers of sensor readings.

Exports:
    - OnceDatasetLoader / SceneAnnotation: ONCE-format annotation loading
    - make_* / realistic_*: Seedable synthetic readings
"""

from dataset.once_loader import OnceDatasetLoader, SceneAnnotation
from dataset.synthetic import (
    make_lidar_reading,
    make_camera_reading,
    make_synchronized_readings,
    realistic_lidar_reading,
    realistic_camera_reading,
)

__all__ = [
    'OnceDatasetLoader',
    'SceneAnnotation',
    'make_lidar_reading',
    'make_camera_reading',
    'make_synchronized_readings',
    'realistic_lidar_reading',
    'realistic_camera_reading',
]
