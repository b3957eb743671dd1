"""
Abstract base for fusion algorithms.

All fusion strategies conform to this interface so the coordinator can
swap them without changing downstream code. Strategies are injected into
the FusionCoordinator; they never inherit state from it.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from perception.sensor_data import SensorReading
from perception.types import FusionOutcome


class FusionAlgorithm(ABC):
    """
    Abstract interface for fusion strategies.

    A strategy is a pure function from a batch of readings to a
    FusionOutcome. It may log but must not mutate its inputs.

    Implementations:
        - KalmanFilterFusion: 2+ concurrent streams
        - ExtendedKalmanFilterFusion: enhanced Kalman model
        - ParticleFilterFusion: single stream / high uncertainty
        - WeightedAverageFusion: simplest baseline
        - MockFusionAlgorithm: canned outcome for tests (strict on empty input)
    """

    @abstractmethod
    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        """
        Fuse a batch of readings.

        Args:
            readings: Synchronized readings; may be None or empty

        Returns:
            FusionOutcome. FusionOutcome.empty() for None/empty input
            (the mock variant raises instead).
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the fusion method."""
        pass

    def is_applicable(self, readings: Sequence[SensorReading]) -> bool:
        """Whether the selection layer may pick this strategy for readings."""
        return len(readings) > 0

    def suitability(self, readings: Sequence[SensorReading]) -> float:
        """Selection score; higher wins among applicable strategies."""
        return 0.0

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"{self.__class__.__name__}(name='{self.name}')"
