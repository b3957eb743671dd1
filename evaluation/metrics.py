"""
Metrics collection for perception pipeline runs.
"""

import numpy as np
import pandas as pd
from collections import Counter
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from perception.types import PerceptionResult


@dataclass(frozen=True)
class FrameRecord:
    """What one processed frame contributed to a run"""
    frame_index: int
    success: bool
    algorithm_name: str
    sensor_count: int
    total_data_points: int
    fusion_confidence: float
    object_count: int
    mean_object_confidence: float
    processing_time_ms: float
    error_message: Optional[str] = None


@dataclass
class PerformanceMetrics:
    """Summary metrics for a run of perception frames"""
    run_name: str
    frames: int = 0

    # Reliability
    successful_frames: int = 0
    success_rate: float = 0.0

    # Detection
    total_objects: int = 0
    avg_objects_per_frame: float = 0.0
    max_objects_per_frame: int = 0
    avg_object_confidence: float = 0.0

    # Fusion
    avg_fusion_confidence: float = 0.0
    avg_sensor_count: float = 0.0

    # Latency
    avg_processing_time_ms: float = 0.0
    p95_processing_time_ms: float = 0.0

    # Per-class counts
    class_counts: Dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Collects per-frame records and computes run metrics"""

    def __init__(self, run_name: str):
        self.run_name = run_name
        self.records: List[FrameRecord] = []
        self.class_counter: Counter = Counter()

    def update(self, result: PerceptionResult):
        """Record one frame's result"""
        outcome = result.fusion_outcome
        confidences = [obj.confidence for obj in result.objects]

        self.records.append(FrameRecord(
            frame_index=len(self.records),
            success=result.success,
            algorithm_name=outcome.algorithm_name,
            sensor_count=outcome.sensor_count,
            total_data_points=outcome.total_data_points,
            fusion_confidence=outcome.confidence,
            object_count=result.object_count,
            mean_object_confidence=float(np.mean(confidences)) if confidences else 0.0,
            processing_time_ms=result.processing_time_ms,
            error_message=result.error_message,
        ))

        self.class_counter.update(obj.object_class.name for obj in result.objects)

    def finalize(self) -> PerformanceMetrics:
        """Compute final metrics"""
        if not self.records:
            return PerformanceMetrics(run_name=self.run_name)

        successes = [r for r in self.records if r.success]
        object_counts = np.array([r.object_count for r in successes]) if successes else np.zeros(1)
        times = np.array([r.processing_time_ms for r in self.records])

        # Object confidence is weighted by how many objects each frame kept
        total_objects = int(object_counts.sum())
        if total_objects > 0:
            avg_obj_conf = float(sum(r.mean_object_confidence * r.object_count
                                     for r in successes) / total_objects)
        else:
            avg_obj_conf = 0.0

        return PerformanceMetrics(
            run_name=self.run_name,
            frames=len(self.records),
            successful_frames=len(successes),
            success_rate=len(successes) / len(self.records),
            total_objects=total_objects,
            avg_objects_per_frame=float(object_counts.mean()),
            max_objects_per_frame=int(object_counts.max()),
            avg_object_confidence=avg_obj_conf,
            avg_fusion_confidence=float(np.mean([r.fusion_confidence for r in successes])) if successes else 0.0,
            avg_sensor_count=float(np.mean([r.sensor_count for r in successes])) if successes else 0.0,
            avg_processing_time_ms=float(times.mean()),
            p95_processing_time_ms=float(np.percentile(times, 95)),
            class_counts=dict(self.class_counter),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Per-frame records as a table"""
        columns = [f for f in FrameRecord.__dataclass_fields__]
        return pd.DataFrame([r.__dict__ for r in self.records], columns=columns)
