"""
Fusion strategy implementations.

The numerics are synthetic: every strategy derives its confidence from the
fraction of structurally valid readings, scaled and capped per strategy.
What differs between strategies is the scaling, the cap, and when the
selection layer considers them applicable.
"""
import logging
from typing import Optional, Sequence, Tuple

from perception.base import FusionAlgorithm
from perception.errors import InvalidInputError
from perception.log_utils import resolve_logger
from perception.sensor_data import SensorReading
from perception.types import FusionOutcome


def summarize_readings(readings: Sequence[SensorReading]) -> Tuple[int, float]:
    """
    Data volume and valid fraction of a non-empty batch.

    Returns:
        (total_data_points over all readings, fraction of readings with is_valid())
    """
    total_points = sum(reading.data_size() for reading in readings)
    valid_count = sum(1 for reading in readings if reading.is_valid())
    return total_points, valid_count / len(readings)


def _capped(valid_fraction: float, scale: float, cap: float) -> float:
    return min(cap, valid_fraction * scale)


class KalmanFilterFusion(FusionAlgorithm):
    """
    Kalman-style fusion for two or more concurrent streams.

    Confidence = valid fraction * 0.95, capped at 0.95.
    """

    SCALE = 0.95
    CAP = 0.95
    MIN_STREAMS = 2

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = resolve_logger(logger, __name__)

    @property
    def name(self) -> str:
        return "KalmanFilterFusion"

    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        if not readings:
            return FusionOutcome.empty()

        self.logger.info("%s: fusing %d sensors", self.name, len(readings))

        total_points, valid_fraction = summarize_readings(readings)
        return FusionOutcome(
            algorithm_name=self.name,
            total_data_points=total_points,
            confidence=_capped(valid_fraction, self.SCALE, self.CAP),
            sensor_count=len(readings),
        )

    def is_applicable(self, readings: Sequence[SensorReading]) -> bool:
        return len(readings) >= self.MIN_STREAMS

    def suitability(self, readings: Sequence[SensorReading]) -> float:
        _, valid_fraction = summarize_readings(readings)
        return _capped(valid_fraction, self.SCALE, self.CAP)


class ExtendedKalmanFilterFusion(KalmanFilterFusion):
    """Kalman-style fusion with an enhanced (nonlinear) model; cap 0.93."""

    CAP = 0.93

    @property
    def name(self) -> str:
        return "Extended Kalman Filter"


class ParticleFilterFusion(FusionAlgorithm):
    """
    Particle-style fusion, the fallback for a single stream or high uncertainty.

    Confidence = valid fraction * 0.90, capped at 0.92. The particle count
    grows with the number of streams; it only affects cost, never the
    outcome.
    """

    SCALE = 0.90
    CAP = 0.92

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = resolve_logger(logger, __name__)

    @property
    def name(self) -> str:
        return "Particle Filter Fusion"

    @staticmethod
    def particle_count(stream_count: int) -> int:
        """Particles to spend on a batch of stream_count streams."""
        if stream_count <= 1:
            return 100
        elif stream_count <= 3:
            return 500
        else:
            return 1000

    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        if not readings:
            return FusionOutcome.empty()

        particles = self.particle_count(len(readings))
        self.logger.info("[Particle Filter] Fusing %d sensors with %d particles",
                         len(readings), particles)

        total_points, valid_fraction = summarize_readings(readings)
        return FusionOutcome(
            algorithm_name=self.name,
            total_data_points=total_points,
            confidence=_capped(valid_fraction, self.SCALE, self.CAP),
            sensor_count=len(readings),
        )

    def suitability(self, readings: Sequence[SensorReading]) -> float:
        _, valid_fraction = summarize_readings(readings)
        return _capped(valid_fraction, self.SCALE, self.CAP)


class WeightedAverageFusion(FusionAlgorithm):
    """Simplest baseline. Confidence = valid fraction * 0.85, capped at 0.80."""

    SCALE = 0.85
    CAP = 0.80

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = resolve_logger(logger, __name__)

    @property
    def name(self) -> str:
        return "Weighted Average Fusion"

    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        if not readings:
            return FusionOutcome.empty()

        self.logger.debug("%s: fusing %d sensors", self.name, len(readings))

        total_points, valid_fraction = summarize_readings(readings)
        return FusionOutcome(
            algorithm_name=self.name,
            total_data_points=total_points,
            confidence=_capped(valid_fraction, self.SCALE, self.CAP),
            sensor_count=len(readings),
        )

    def suitability(self, readings: Sequence[SensorReading]) -> float:
        _, valid_fraction = summarize_readings(readings)
        return _capped(valid_fraction, self.SCALE, self.CAP)


class MockFusionAlgorithm(FusionAlgorithm):
    """
    Returns a predefined outcome for predictable tests.

    Unlike the production strategies it raises InvalidInputError on
    None/empty input, so negative paths can be exercised.
    """

    def __init__(self, predefined: Optional[FusionOutcome] = None):
        self.predefined = predefined or FusionOutcome(
            algorithm_name=self.name,
            total_data_points=100,
            confidence=0.95,
            sensor_count=2,
        )
        self.calls = 0

    @property
    def name(self) -> str:
        return "Mock Fusion Algorithm"

    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        if not readings:
            raise InvalidInputError("Sensor data cannot be None or empty")

        self.calls += 1
        return self.predefined

    def is_applicable(self, readings: Sequence[SensorReading]) -> bool:
        return False
