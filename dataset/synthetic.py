"""
Synthetic sensor readings.

Seedable generators used by the demo, the evaluation scripts and the
tests. Point clouds are uniform boxes around the vehicle; camera frames
are either a repeating gradient or mid-range noise.
"""
import time
from typing import List, Optional

import numpy as np

from perception.sensor_data import CameraReading, LidarReading


def _now_ms() -> int:
    return int(time.time() * 1000)


def make_lidar_reading(num_points: int,
                       timestamp: Optional[int] = None,
                       sensor_id: str = "TEST-LIDAR-001",
                       seed: Optional[int] = 42) -> LidarReading:
    """
    LiDAR reading with num_points uniformly placed points

    Points fall in x, y ∈ [-25, 25), z ∈ [0, 3), intensity ∈ [0, 255).
    """
    rng = np.random.default_rng(seed)
    return LidarReading(
        timestamp=timestamp if timestamp is not None else _now_ms(),
        sensor_id=sensor_id,
        x=(rng.random(num_points) - 0.5) * 50,
        y=(rng.random(num_points) - 0.5) * 50,
        z=rng.random(num_points) * 3,
        intensity=rng.random(num_points) * 255,
    )


def make_camera_reading(width: int = 100,
                        height: int = 100,
                        timestamp: Optional[int] = None,
                        sensor_id: str = "TEST-CAMERA-001") -> CameraReading:
    """RGB frame filled with a repeating 0..255 gradient."""
    size = width * height * CameraReading.CHANNELS
    pixels = (np.arange(size) % 256).astype(np.uint8).tobytes()
    return CameraReading(
        timestamp=timestamp if timestamp is not None else _now_ms(),
        sensor_id=sensor_id,
        pixels=pixels,
        width=width,
        height=height,
    )


def realistic_lidar_reading(sensor_id: str,
                            timestamp: Optional[int] = None,
                            num_points: int = 5000,
                            seed: Optional[int] = None) -> LidarReading:
    """Roof-mounted LiDAR sweep: x, y ∈ [-50, 50) m, z ∈ [0, 5) m."""
    rng = np.random.default_rng(seed)
    return LidarReading(
        timestamp=timestamp if timestamp is not None else _now_ms(),
        sensor_id=sensor_id,
        x=(rng.random(num_points) - 0.5) * 100,
        y=(rng.random(num_points) - 0.5) * 100,
        z=rng.random(num_points) * 5,
        intensity=rng.random(num_points) * 255,
    )


def realistic_camera_reading(sensor_id: str,
                             timestamp: Optional[int] = None,
                             width: int = 1920,
                             height: int = 1080,
                             seed: Optional[int] = None) -> CameraReading:
    """Full-HD frame of mid-range noise (values 64..191)."""
    rng = np.random.default_rng(seed)
    size = width * height * CameraReading.CHANNELS
    pixels = rng.integers(64, 192, size=size, dtype=np.uint8).tobytes()
    return CameraReading(
        timestamp=timestamp if timestamp is not None else _now_ms(),
        sensor_id=sensor_id,
        pixels=pixels,
        width=width,
        height=height,
    )


def make_synchronized_readings(timestamp: int) -> List:
    """A 50-point LiDAR reading and a 100x100 camera frame sharing timestamp."""
    n = 50
    lidar = LidarReading(
        timestamp=timestamp,
        sensor_id="SYNC-LIDAR-001",
        x=np.arange(n) * 0.5,
        y=np.arange(n) * 0.5,
        z=np.ones(n),
        intensity=np.full(n, 128.0),
    )
    camera = CameraReading(
        timestamp=timestamp,
        sensor_id="SYNC-CAMERA-001",
        pixels=bytes(100 * 100 * CameraReading.CHANNELS),
        width=100,
        height=100,
    )
    return [lidar, camera]
