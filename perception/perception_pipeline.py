"""
Complete perception pipeline integrating validation, fusion and detection.
Produces one PerceptionResult per frame of sensor readings.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from perception.algorithm_selector import AdaptiveFusion, create_algorithm, default_selector
from perception.config import PerceptionConfig
from perception.detector import DetectionEngine
from perception.errors import (
    FusionFailedError,
    InvalidDetectionInputError,
    InvalidInputError,
)
from perception.fusion_coordinator import FusionCoordinator
from perception.log_utils import resolve_logger, sanitize_for_log
from perception.sensor_data import SensorReading
from perception.types import DetectedObject, FusionOutcome, PerceptionResult
from security.security_validator import SecurityValidator


class PerceptionPipeline:
    """
    Complete perception pipeline.
    Readings → Validation → Synchronized Fusion → Detection → PerceptionResult

    Security violations are raised to the caller unchanged. Input, fusion
    and detection errors become a failed PerceptionResult.
    """

    def __init__(self,
                 coordinator: FusionCoordinator,
                 detector: DetectionEngine,
                 validator: Optional[SecurityValidator] = None,
                 max_workers: int = 4,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize perception pipeline

        Args:
            coordinator: Fusion stage (owns the injected strategy)
            detector: Detection stage
            validator: Security gate run on every reading; a default one
                when omitted
            max_workers: Worker threads used by process_frames()
            logger: Logger to report on; defaults to this module's logger
        """
        self.coordinator = coordinator
        self.detector = detector
        self.max_workers = max_workers
        self.logger = resolve_logger(logger, __name__)
        self.validator = validator or SecurityValidator(logger=logger)

    @classmethod
    def from_config(cls, config: PerceptionConfig,
                    logger: Optional[logging.Logger] = None) -> 'PerceptionPipeline':
        """Build the pipeline described by a PerceptionConfig."""
        if config.algorithm == 'auto':
            algorithm = AdaptiveFusion(default_selector(logger=logger))
        else:
            algorithm = create_algorithm(config.algorithm, logger=logger)

        return cls(
            coordinator=FusionCoordinator(algorithm,
                                          sync_window_ms=config.sync_window_ms,
                                          logger=logger),
            detector=DetectionEngine(threshold=config.detection_threshold,
                                     seed=config.seed,
                                     logger=logger),
            validator=SecurityValidator(logger=logger),
            max_workers=config.max_workers,
            logger=logger,
        )

    def process(self, readings: Optional[Sequence[SensorReading]]) -> PerceptionResult:
        """
        Process one frame through the complete pipeline

        Args:
            readings: Sensor readings of one frame

        Returns:
            PerceptionResult; success=False with a message on ordinary
            processing errors

        Raises:
            SecurityViolationError: a reading failed the security gate
        """
        start = time.perf_counter()
        outcome: Optional[FusionOutcome] = None

        try:
            # 1. Validate
            self._validate(readings)

            # 2. Fuse
            outcome = self.coordinator.process(readings)

            # 3. Detect
            objects = self.detector.detect(outcome)
        except (InvalidInputError, FusionFailedError) as e:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            message = sanitize_for_log(e)
            self.logger.error("Perception failed: %s", message)
            return PerceptionResult.failed(message, elapsed_ms, fusion_outcome=outcome)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        result = PerceptionResult(
            objects=tuple(objects),
            fusion_outcome=outcome,
            processing_time_ms=elapsed_ms,
        )

        self.logger.info("Perception complete: %d objects detected in %.1fms using %s",
                         result.object_count, elapsed_ms,
                         sanitize_for_log(outcome.algorithm_name))
        return result

    def process_frames(self, frames: Sequence[Sequence[SensorReading]],
                       max_workers: Optional[int] = None) -> List[PerceptionResult]:
        """
        Process independent frames concurrently

        Frames share no mutable state, so each one runs on its own worker.
        Results are returned in input order; a security violation in any
        frame is raised.
        """
        workers = max_workers or self.max_workers
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.process, frames))

    def detect_raw(self, reading: SensorReading) -> List[DetectedObject]:
        """Validate one reading and detect directly on it, skipping fusion."""
        if reading is None:
            raise InvalidDetectionInputError("reading must not be None")

        self.validator.validate_reading(reading)
        return self.detector.detect_reading(reading)

    def _validate(self, readings: Optional[Sequence[SensorReading]]):
        if readings is None:
            raise InvalidInputError("readings must not be None")

        for reading in readings:
            if not isinstance(reading, SensorReading):
                raise InvalidInputError(
                    f"frame contains a non-reading element: {type(reading).__name__}"
                )
            self.validator.validate_reading(reading)
