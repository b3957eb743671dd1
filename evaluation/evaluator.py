"""
Evaluation framework for fusion strategies.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from perception.base import FusionAlgorithm
from perception.detector import DetectionEngine
from perception.fusion_coordinator import FusionCoordinator
from perception.log_utils import resolve_logger
from perception.perception_pipeline import PerceptionPipeline
from perception.sensor_data import SensorReading
from perception.types import FusionOutcome
from evaluation.metrics import MetricsCollector, PerformanceMetrics
from security.security_validator import SecurityValidator


class AlgorithmEvaluator:
    """Runs fusion strategies over the same frames and compares them"""

    def __init__(self, sync_window_ms: int = 50, seed: Optional[int] = 7,
                 logger: Optional[logging.Logger] = None):
        self.sync_window_ms = sync_window_ms
        self.seed = seed
        self.logger = resolve_logger(logger, __name__)

    def evaluate_algorithm(self,
                           algorithm: FusionAlgorithm,
                           frames: Sequence[Sequence[SensorReading]]) -> PerformanceMetrics:
        """
        Evaluate one strategy on a sequence of frames

        Args:
            algorithm: Strategy instance (fresh per evaluation)
            frames: Reading batches, one per perception frame

        Returns:
            PerformanceMetrics for the run
        """
        pipeline = PerceptionPipeline(
            coordinator=FusionCoordinator(algorithm, self.sync_window_ms, logger=self.logger),
            detector=DetectionEngine(seed=self.seed, logger=self.logger),
            validator=SecurityValidator(logger=self.logger),
            logger=self.logger,
        )

        collector = MetricsCollector(algorithm.name)
        for result in pipeline.process_frames(frames):
            collector.update(result)

        metrics = collector.finalize()
        self.logger.info("%s: %d frames, %.1f objects/frame, fusion confidence %.3f",
                         algorithm.name, metrics.frames,
                         metrics.avg_objects_per_frame, metrics.avg_fusion_confidence)
        return metrics

    def compare(self, algorithms: Sequence[FusionAlgorithm],
                frames: Sequence[Sequence[SensorReading]]) -> Dict[str, PerformanceMetrics]:
        """Evaluate every strategy on the same frames"""
        return {algorithm.name: self.evaluate_algorithm(algorithm, frames)
                for algorithm in algorithms}

    def detection_scaling(self,
                          data_points: Sequence[int],
                          confidence: float,
                          trials: int = 50) -> List[float]:
        """
        Mean detected-object count per data volume

        Each trial uses its own seed so the mean is over independent draws.

        Returns:
            Mean object count for each entry of data_points
        """
        base_seed = self.seed if self.seed is not None else 0
        means = []
        for points in data_points:
            outcome = FusionOutcome("scaling", int(points), confidence, 1)
            counts = [
                len(DetectionEngine(seed=base_seed + trial, logger=self.logger).detect(outcome))
                for trial in range(trials)
            ]
            means.append(float(np.mean(counts)))
        return means
