"""
Pipeline output types.

This module defines the values produced by the fusion and detection
stages and the result assembled by the orchestrator. They form the
boundary between the perception core and anything that reports on it,
so the field guarantees below are checked at construction time.
"""
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

EMPTY_ALGORITHM_NAME = "None"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class FusionOutcome:
    """
    Result of fusing one synchronized batch of sensor readings.

    Field Guarantees:
        - total_data_points: sum of data_size() over the fused readings
        - confidence: [0.0, 1.0]
        - sensor_count: number of readings handed to the algorithm
        - timestamp: creation time in ms (ignored by ==)

    The empty sentinel (sensor_count == 0, confidence == 0.0, algorithm
    "None") stands for "no data". A genuine low-confidence outcome is told
    apart from it by sensor_count alone.
    """

    algorithm_name: str
    total_data_points: int
    confidence: float
    sensor_count: int
    timestamp: int = field(default_factory=_now_ms, compare=False)

    def __post_init__(self):
        """Validate invariants at construction time."""
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(
                f"confidence must be in [0, 1], got {self.confidence}"
            )

        if self.sensor_count < 0:
            raise ValueError(
                f"sensor_count must be >= 0, got {self.sensor_count}"
            )

        if self.total_data_points < 0:
            raise ValueError(
                f"total_data_points must be >= 0, got {self.total_data_points}"
            )

    @classmethod
    def empty(cls) -> 'FusionOutcome':
        """The no-data / nothing-fused sentinel."""
        return cls(
            algorithm_name=EMPTY_ALGORITHM_NAME,
            total_data_points=0,
            confidence=0.0,
            sensor_count=0,
        )

    def is_valid(self) -> bool:
        return self.sensor_count > 0 and self.confidence >= 0.0

    def is_empty(self) -> bool:
        return self.sensor_count == 0

    def __str__(self) -> str:
        return (f"FusionOutcome[algorithm={self.algorithm_name}, "
                f"dataPoints={self.total_data_points}, "
                f"confidence={self.confidence:.2f}, sensors={self.sensor_count}]")


class ObjectClass(Enum):
    """Object classes reported by the detection stage."""
    VEHICLE = "vehicle"
    PEDESTRIAN = "pedestrian"
    BICYCLE = "bicycle"
    TRAFFIC_SIGN = "traffic_sign"
    TRAFFIC_LIGHT = "traffic_light"
    OBSTACLE = "obstacle"


@dataclass(frozen=True)
class Position3D:
    """Position in the vehicle frame (meters)."""
    x: float
    y: float
    z: float

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.x, self.y, self.z)):
            raise ValueError(f"position must be finite, got {self.as_tuple()}")

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


@dataclass(frozen=True)
class DetectedObject:
    """
    One classified object from a detection call.

    Field Guarantees:
        - object_id: unique within the detection call that produced it
        - confidence: [0.0, 1.0]; objects leaving the detection stage are
          always strictly above the detection threshold
    """

    # ========== Identity ==========
    object_id: str

    # ========== Classification ==========
    object_class: ObjectClass
    confidence: float

    # ========== Location ==========
    position: Position3D

    def __post_init__(self):
        """Validate invariants at construction time."""
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(
                f"confidence must be in [0, 1], got {self.confidence}"
            )

        if not isinstance(self.object_class, ObjectClass):
            raise TypeError(
                f"object_class must be ObjectClass, "
                f"got {type(self.object_class).__name__}"
            )

    def __str__(self) -> str:
        return (f"DetectedObject[id={self.object_id}, type={self.object_class.name}, "
                f"confidence={self.confidence:.2f}, pos={self.position}]")


@dataclass(frozen=True)
class PerceptionResult:
    """
    Everything one perception frame produced.

    A failed frame carries the empty fusion outcome (or whatever was
    fused before the failure), no objects, and an error_message.
    """

    objects: Tuple[DetectedObject, ...]
    fusion_outcome: FusionOutcome
    processing_time_ms: float
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'objects', tuple(self.objects))

        if self.success and self.error_message is not None:
            raise ValueError("successful result cannot carry an error_message")

        if not self.success and not self.error_message:
            raise ValueError("failed result requires an error_message")

    @property
    def object_count(self) -> int:
        return len(self.objects)

    @classmethod
    def failed(cls, error_message: str, processing_time_ms: float,
               fusion_outcome: Optional[FusionOutcome] = None) -> 'PerceptionResult':
        return cls(
            objects=(),
            fusion_outcome=fusion_outcome or FusionOutcome.empty(),
            processing_time_ms=processing_time_ms,
            success=False,
            error_message=error_message,
        )
