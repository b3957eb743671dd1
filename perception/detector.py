"""
Synthetic object detector.
Turns a fusion outcome (or a single raw reading) into classified objects.
"""

import logging
from typing import List, Optional

import numpy as np

from perception.errors import ConfigurationError, InvalidDetectionInputError
from perception.log_utils import resolve_logger, sanitize_for_log
from perception.sensor_data import SensorReading
from perception.types import DetectedObject, FusionOutcome, ObjectClass, Position3D

DETECTION_THRESHOLD = 0.5

# Candidate caps for the fused and raw-reading paths
MAX_FUSED_CANDIDATES = 50
FUSED_POINTS_PER_CANDIDATE = 1000
MAX_RAW_CANDIDATES = 10
RAW_POINTS_PER_CANDIDATE = 100_000

# Every detected position lies inside these bounds (meters)
X_BOUNDS = (-25.0, 25.0)
Y_BOUNDS = (-25.0, 25.0)
Z_BOUNDS = (0.0, 2.0)

# Evidence margins below this collapse onto the threshold
MIN_EVIDENCE_MARGIN = 0.05

OBJECT_CLASSES = tuple(ObjectClass)


class DetectionEngine:
    """
    Confidence-filtered synthetic detector.

    Candidates are placed uniformly inside the position bounds with a
    uniformly drawn class. Each candidate gets an evidence margin
    u * quality, u ~ U[0, 1), where quality is the fused confidence (or
    1.0 / 0.0 for a valid / invalid raw reading). Margins under
    MIN_EVIDENCE_MARGIN collapse to zero, and

        confidence = 0.5 + 0.5 * margin  in [0.5, 1.0)

    Only candidates strictly above the threshold survive, so weaker fusion
    yields fewer objects and more data yields more candidates.
    """

    def __init__(self,
                 threshold: float = DETECTION_THRESHOLD,
                 seed: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize detector

        Args:
            threshold: Objects must score strictly above this to be reported;
                never below DETECTION_THRESHOLD
            seed: With a seed every call draws from a fresh generator seeded
                with it (identical input -> identical output). Without one,
                calls share an entropy-seeded generator.
            logger: Logger to report on; defaults to this module's logger
        """
        if not (DETECTION_THRESHOLD <= threshold < 1.0):
            raise ConfigurationError(
                f"threshold must be in [{DETECTION_THRESHOLD}, 1), got {threshold}"
            )

        self.threshold = threshold
        self.seed = seed
        self.logger = resolve_logger(logger, __name__)
        self._entropy_rng = np.random.default_rng()

    def detect(self, source, rng: Optional[np.random.Generator] = None) -> List[DetectedObject]:
        """
        Detect objects in fused data

        Args:
            source: FusionOutcome (raw SensorReading is routed to detect_reading)
            rng: Generator overriding the engine's seeding policy

        Returns:
            Objects with confidence strictly above the threshold
        """
        if isinstance(source, SensorReading):
            return self.detect_reading(source, rng=rng)

        if not isinstance(source, FusionOutcome):
            raise InvalidDetectionInputError(
                f"detect() needs a FusionOutcome or SensorReading, "
                f"got {type(source).__name__}"
            )

        self.logger.info("Starting object detection on fused data from %d sensors",
                         source.sensor_count)

        num_candidates = min(MAX_FUSED_CANDIDATES,
                             source.total_data_points // FUSED_POINTS_PER_CANDIDATE + 1)
        objects = self._generate(num_candidates, source.confidence,
                                 rng or self._generator())

        self.logger.info("Object detection completed: %d of %d candidates kept",
                         len(objects), num_candidates)
        return objects

    def detect_reading(self, reading: SensorReading,
                       rng: Optional[np.random.Generator] = None) -> List[DetectedObject]:
        """
        Detect objects directly from one raw reading (no fusion benefit).

        Args:
            reading: Raw sensor reading
            rng: Generator overriding the engine's seeding policy
        """
        if not isinstance(reading, SensorReading):
            raise InvalidDetectionInputError(
                f"detect_reading() needs a SensorReading, got {type(reading).__name__}"
            )

        self.logger.info("Detecting from raw sensor: %s",
                         sanitize_for_log(reading.sensor_id))

        num_candidates = min(MAX_RAW_CANDIDATES,
                             reading.data_size() // RAW_POINTS_PER_CANDIDATE + 1)
        quality = 1.0 if reading.is_valid() else 0.0
        return self._generate(num_candidates, quality, rng or self._generator())

    def filter_by_confidence(self, objects: List[DetectedObject]) -> List[DetectedObject]:
        """Keep objects scoring strictly above the threshold."""
        return [obj for obj in objects if obj.confidence > self.threshold]

    def _generator(self) -> np.random.Generator:
        if self.seed is not None:
            return np.random.default_rng(self.seed)
        return self._entropy_rng

    def _generate(self, num_candidates: int, quality: float,
                  rng: np.random.Generator) -> List[DetectedObject]:
        """Draw num_candidates candidates and filter them."""
        quality = float(np.clip(quality, 0.0, 1.0))

        class_idx = rng.integers(0, len(OBJECT_CLASSES), size=num_candidates)
        xs = rng.uniform(*X_BOUNDS, size=num_candidates)
        ys = rng.uniform(*Y_BOUNDS, size=num_candidates)
        zs = rng.uniform(*Z_BOUNDS, size=num_candidates)

        margins = rng.random(num_candidates) * quality
        margins[margins < MIN_EVIDENCE_MARGIN] = 0.0
        confidences = DETECTION_THRESHOLD + 0.5 * margins

        candidates = [
            DetectedObject(
                object_id=f"OBJ_{i}",
                object_class=OBJECT_CLASSES[class_idx[i]],
                confidence=float(confidences[i]),
                position=Position3D(float(xs[i]), float(ys[i]), float(zs[i])),
            )
            for i in range(num_candidates)
        ]
        return self.filter_by_confidence(candidates)
