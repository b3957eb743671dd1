"""
Sensor reading value types.

A SensorReading is one sensor's data at one instant. Readings are
construct-or-fail: every invariant is checked in __post_init__ and an
InvalidInputError is raised before a partially valid object can exist.
After construction a reading is immutable (frozen dataclass, read-only
arrays, bytes payload).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np

from perception.errors import InvalidInputError

# Upper bounds that block memory-exhaustion payloads
MAX_LIDAR_POINTS = 2_000_000
MAX_CAMERA_BYTES = 100_000_000

# Brightness / contrast are estimated from a prefix of the buffer
IMAGE_SAMPLE_SIZE = 1000


class SensorKind(Enum):
    """Sensor modalities known to the pipeline."""
    LIDAR = "lidar"
    CAMERA = "camera"
    RADAR = "radar"
    GPS = "gps"
    IMU = "imu"


def _require_timestamp(timestamp) -> int:
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, np.integer)):
        raise InvalidInputError(
            f"timestamp must be an integer, got {type(timestamp).__name__}"
        )
    if timestamp <= 0:
        raise InvalidInputError(f"timestamp must be > 0, got {timestamp}")
    return int(timestamp)


@dataclass(frozen=True, eq=False)
class SensorReading(ABC):
    """
    Abstract reading shared by all sensor kinds.

    Field Guarantees:
        - timestamp: integer milliseconds, strictly positive
        - sensor_id: non-empty string (injection patterns are checked by
          the security validator before readings reach the pipeline)
        - sensor_kind: fixed by the concrete subclass
    """

    timestamp: int
    sensor_id: str

    sensor_kind: ClassVar[SensorKind]

    def __post_init__(self):
        object.__setattr__(self, 'timestamp', _require_timestamp(self.timestamp))

        if not isinstance(self.sensor_id, str) or not self.sensor_id.strip():
            raise InvalidInputError("sensor_id must be a non-empty string")

    @abstractmethod
    def data_size(self) -> int:
        """Volume of payload data (points for LiDAR, bytes for camera)."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Kind-specific structural check."""

    @abstractmethod
    def metrics_report(self) -> str:
        """One-line human-readable summary of the payload."""

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(kind={self.sensor_kind.name}, "
                f"id='{self.sensor_id}', timestamp={self.timestamp})")


def _frozen_array(values, name: str) -> np.ndarray:
    if values is None:
        raise InvalidInputError(f"{name} array must not be None")

    array = np.array(values, dtype=np.float32).ravel()
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class LidarReading(SensorReading):
    """
    LiDAR point cloud stored as four parallel arrays.

    One entry per point in each of x, y, z and intensity. All four arrays
    must have the same length; an empty cloud is allowed but not valid.
    """

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    intensity: np.ndarray

    sensor_kind: ClassVar[SensorKind] = SensorKind.LIDAR

    def __post_init__(self):
        super().__post_init__()

        arrays = {
            name: _frozen_array(getattr(self, name), name)
            for name in ('x', 'y', 'z', 'intensity')
        }
        lengths = {name: len(values) for name, values in arrays.items()}
        if len(set(lengths.values())) != 1:
            raise InvalidInputError(
                f"LiDAR arrays must have identical lengths, got {lengths}"
            )

        for name, values in arrays.items():
            object.__setattr__(self, name, values)

    @property
    def point_count(self) -> int:
        return len(self.x)

    @property
    def max_range(self) -> float:
        """Largest Euclidean distance of any point from the sensor."""
        if self.point_count == 0:
            return 0.0
        return float(np.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2).max())

    @property
    def average_intensity(self) -> float:
        if self.point_count == 0:
            return 0.0
        return float(self.intensity.mean())

    def data_size(self) -> int:
        return self.point_count

    def is_valid(self) -> bool:
        return (0 < self.point_count < MAX_LIDAR_POINTS
                and self.max_range > 0)

    def points_in_range(self, min_range: float, max_range: float) -> np.ndarray:
        """
        Points whose horizontal distance lies within [min_range, max_range].

        Returns:
            (N, 4) array of [x, y, z, intensity] rows
        """
        distance = np.hypot(self.x, self.y)
        mask = (distance >= min_range) & (distance <= max_range)
        return np.column_stack(
            [self.x[mask], self.y[mask], self.z[mask], self.intensity[mask]]
        )

    def metrics_report(self) -> str:
        return (f"LiDAR Metrics - Points: {self.point_count}, "
                f"Max Range: {self.max_range:.2f}m, "
                f"Avg Intensity: {self.average_intensity:.2f}")


@dataclass(frozen=True)
class ImageStatistics:
    """Summary statistics sampled from a camera frame."""
    width: int
    height: int
    brightness: int
    contrast: float

    def __str__(self) -> str:
        return (f"ImageStats[{self.width}x{self.height}, "
                f"brightness={self.brightness}, contrast={self.contrast:.1f}]")


@dataclass(frozen=True, eq=False)
class CameraReading(SensorReading):
    """
    RGB camera frame.

    pixels holds width * height * CHANNELS bytes, or nothing at all
    (a frame that carries only its geometry, which is not valid).
    """

    pixels: bytes
    width: int
    height: int

    CHANNELS: ClassVar[int] = 3
    sensor_kind: ClassVar[SensorKind] = SensorKind.CAMERA

    def __post_init__(self):
        super().__post_init__()

        if self.width <= 0 or self.height <= 0:
            raise InvalidInputError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )

        pixels = bytes(self.pixels) if self.pixels is not None else b""
        expected = self.width * self.height * self.CHANNELS
        if pixels and len(pixels) != expected:
            raise InvalidInputError(
                f"Pixel buffer has {len(pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGB"
            )
        object.__setattr__(self, 'pixels', pixels)

    @property
    def brightness(self) -> int:
        """Mean byte value over the first IMAGE_SAMPLE_SIZE bytes."""
        sample = self._sample()
        if sample.size == 0:
            return 0
        return int(sample.mean())

    @property
    def contrast(self) -> float:
        sample = self._sample()
        if sample.size == 0:
            return 0.0
        return float(sample.max()) - float(sample.min())

    def _sample(self) -> np.ndarray:
        return np.frombuffer(self.pixels[:IMAGE_SAMPLE_SIZE], dtype=np.uint8)

    def data_size(self) -> int:
        return len(self.pixels)

    def is_valid(self) -> bool:
        return (self.width > 0
                and self.height > 0
                and 0 < len(self.pixels) <= MAX_CAMERA_BYTES
                and 0 <= self.brightness <= 255)

    def statistics(self) -> ImageStatistics:
        return ImageStatistics(
            width=self.width,
            height=self.height,
            brightness=self.brightness,
            contrast=self.contrast,
        )

    def metrics_report(self) -> str:
        size_mb = self.data_size() / (1024.0 * 1024.0)
        return (f"Camera Metrics - Resolution: {self.width}x{self.height}, "
                f"Brightness: {self.brightness}, Size: {size_mb:.2f}MB")
