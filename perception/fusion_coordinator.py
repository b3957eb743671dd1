"""
Fusion coordination: time synchronization and strategy dispatch.

Batch → Synchronize to reference time → Injected strategy → FusionOutcome

Failure policy: an exception raised inside a strategy is logged once and
re-raised as FusionFailedError. Security violations pass through
untouched. The coordinator never returns the empty outcome to hide a
failure; FusionOutcome.empty() only ever means "no readings".
"""
import logging
from typing import List, Optional, Sequence

from perception.base import FusionAlgorithm
from perception.errors import (
    ConfigurationError,
    FusionFailedError,
    InvalidInputError,
    SecurityViolationError,
)
from perception.log_utils import resolve_logger, sanitize_for_log
from perception.sensor_data import SensorReading
from perception.types import FusionOutcome

DEFAULT_SYNC_WINDOW_MS = 50


class FusionCoordinator:
    """
    Synchronizes a batch of readings and hands it to the injected strategy.
    """

    def __init__(self,
                 algorithm: FusionAlgorithm,
                 sync_window_ms: int = DEFAULT_SYNC_WINDOW_MS,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize coordinator

        Args:
            algorithm: Fusion strategy invoked for every batch
            sync_window_ms: Max |timestamp - reference| for a reading to count
                as concurrent with the reference reading
            logger: Logger to report on; defaults to this module's logger
        """
        if algorithm is None:
            raise ConfigurationError("FusionCoordinator requires a fusion algorithm")
        if sync_window_ms < 0:
            raise ConfigurationError(
                f"sync_window_ms must be >= 0, got {sync_window_ms}"
            )

        self.algorithm = algorithm
        self.sync_window_ms = sync_window_ms
        self.logger = resolve_logger(logger, __name__)

    def process(self, readings: Optional[Sequence[SensorReading]]) -> FusionOutcome:
        """
        Fuse one batch of readings.

        Args:
            readings: Readings of one perception frame

        Returns:
            Outcome of the strategy on the synchronized subset, or
            FusionOutcome.empty() when the batch is empty

        Raises:
            InvalidInputError: readings is None
            FusionFailedError: the strategy raised
            SecurityViolationError: propagated unchanged from the strategy
        """
        if readings is None:
            raise InvalidInputError("readings must not be None")

        if len(readings) == 0:
            self.logger.warning("No sensors provided for fusion")
            return FusionOutcome.empty()

        self.logger.info("Starting fusion with %d sensors using %s",
                         len(readings), sanitize_for_log(self.algorithm.name))

        synchronized = self.synchronize(readings)

        try:
            outcome = self.algorithm.fuse(synchronized)
        except SecurityViolationError:
            raise
        except Exception as e:
            self.logger.error("Fusion failed in %s: %s",
                              sanitize_for_log(self.algorithm.name),
                              sanitize_for_log(e))
            raise FusionFailedError(
                f"Fusion failure in {self.algorithm.name}: {e}",
                algorithm_name=self.algorithm.name,
            ) from e

        self.logger.info("Fusion completed: confidence=%.3f sensors=%d",
                         outcome.confidence, outcome.sensor_count)
        return outcome

    def synchronize(self, readings: Sequence[SensorReading],
                    reference_time: Optional[int] = None) -> List[SensorReading]:
        """
        Readings within the sync window of the reference time.

        The reference defaults to the first reading's timestamp. Input
        order is preserved. If nothing falls inside the window the full,
        unsynchronized batch is returned instead.
        """
        readings = list(readings)
        if not readings:
            return readings

        if reference_time is None:
            reference_time = readings[0].timestamp

        # Python ints: timestamps are unbounded
        synchronized = [r for r in readings
                        if abs(r.timestamp - reference_time) <= self.sync_window_ms]
        if not synchronized:
            self.logger.warning(
                "No readings within %dms of reference %d; using all %d readings",
                self.sync_window_ms, reference_time, len(readings)
            )
            return readings

        dropped = len(readings) - len(synchronized)
        if dropped:
            self.logger.debug("Dropped %d readings outside the %dms sync window",
                              dropped, self.sync_window_ms)
        return synchronized
