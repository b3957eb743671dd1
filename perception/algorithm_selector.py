"""
Fusion strategy selection.

The coordinator accepts any injected strategy. This module is the optional
layer that picks one per batch: among the registered strategies that
declare themselves applicable, the highest suitability wins, and ties go
to registration order.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from perception.base import FusionAlgorithm
from perception.errors import ConfigurationError
from perception.fusion_algorithms import (
    ExtendedKalmanFilterFusion,
    KalmanFilterFusion,
    ParticleFilterFusion,
    WeightedAverageFusion,
)
from perception.log_utils import resolve_logger
from perception.sensor_data import SensorReading
from perception.types import FusionOutcome

# Config keys -> strategy factories
ALGORITHM_REGISTRY: Dict[str, Callable[..., FusionAlgorithm]] = {
    'kalman': KalmanFilterFusion,
    'extended_kalman': ExtendedKalmanFilterFusion,
    'particle': ParticleFilterFusion,
    'weighted_average': WeightedAverageFusion,
}


def create_algorithm(key: str, logger: Optional[logging.Logger] = None) -> FusionAlgorithm:
    """
    Build a strategy from its configuration key.

    Raises:
        ConfigurationError: unknown key
    """
    try:
        factory = ALGORITHM_REGISTRY[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown fusion algorithm '{key}', "
            f"expected one of {sorted(ALGORITHM_REGISTRY)}"
        ) from None
    return factory(logger=logger)


class FusionAlgorithmSelector:
    """Chooses the best applicable strategy for a batch of readings."""

    def __init__(self, algorithms: Sequence[FusionAlgorithm],
                 logger: Optional[logging.Logger] = None):
        if not algorithms:
            raise ConfigurationError("selector needs at least one algorithm")

        self.algorithms: List[FusionAlgorithm] = list(algorithms)
        self.logger = resolve_logger(logger, __name__)

    def select(self, readings: Sequence[SensorReading]) -> FusionAlgorithm:
        """
        Pick the highest-scoring applicable strategy.

        Raises:
            ConfigurationError: no registered strategy is applicable
        """
        best: Optional[FusionAlgorithm] = None
        best_score = float('-inf')

        for algorithm in self.algorithms:
            if not algorithm.is_applicable(readings):
                continue
            score = algorithm.suitability(readings)
            # Strict comparison keeps the earlier registration on ties
            if score > best_score:
                best, best_score = algorithm, score

        if best is None:
            raise ConfigurationError(
                f"No applicable fusion algorithm for {len(readings)} readings"
            )

        self.logger.info("Selected algorithm: %s (score=%.3f, streams=%d)",
                         best.name, best_score, len(readings))
        return best


def default_selector(logger: Optional[logging.Logger] = None) -> FusionAlgorithmSelector:
    """Selector over every production strategy."""
    return FusionAlgorithmSelector(
        [create_algorithm(key, logger=logger) for key in ALGORITHM_REGISTRY],
        logger=logger,
    )


class AdaptiveFusion(FusionAlgorithm):
    """
    Strategy that delegates each batch to whatever the selector picks.

    Lets the coordinator run with algorithm 'auto' while still holding a
    single injected strategy.
    """

    def __init__(self, selector: FusionAlgorithmSelector):
        self.selector = selector

    @property
    def name(self) -> str:
        return "Adaptive Fusion"

    def fuse(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        if not readings:
            return FusionOutcome.empty()
        return self.selector.select(readings).fuse(readings)
