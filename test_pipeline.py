"""
Integration tests for the complete perception pipeline.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import logging

import pytest

from dataset.synthetic import (
    make_camera_reading,
    make_lidar_reading,
    make_synchronized_readings,
    realistic_camera_reading,
    realistic_lidar_reading,
)
from perception.algorithm_selector import AdaptiveFusion
from perception.base import FusionAlgorithm
from perception.config import PerceptionConfig
from perception.detector import DETECTION_THRESHOLD, DetectionEngine
from perception.errors import InvalidDetectionInputError, SecurityViolationError
from perception.fusion_algorithms import KalmanFilterFusion, ParticleFilterFusion
from perception.fusion_coordinator import FusionCoordinator
from perception.perception_pipeline import PerceptionPipeline
from perception.types import FusionOutcome
from security.security_validator import SecurityValidator


class FailingFusion(FusionAlgorithm):

    @property
    def name(self):
        return "Failing Fusion"

    def fuse(self, readings):
        raise ValueError("covariance\nnot positive definite")


def build_pipeline(algorithm=None, seed=7, **kwargs):
    return PerceptionPipeline(
        coordinator=FusionCoordinator(algorithm or KalmanFilterFusion()),
        detector=DetectionEngine(seed=seed),
        **kwargs,
    )


def test_pipeline_end_to_end():
    print("\n" + "="*70)
    print("TEST: End-to-End Perception")
    print("="*70)

    pipeline = build_pipeline()
    readings = [
        realistic_lidar_reading("LIDAR-01", timestamp=1000, num_points=5000, seed=1),
        realistic_camera_reading("CAM-01", timestamp=1040, seed=1),
    ]

    result = pipeline.process(readings)

    assert result.success
    assert result.error_message is None
    assert result.fusion_outcome.sensor_count == 2
    assert result.fusion_outcome.confidence == pytest.approx(0.95)
    assert result.object_count > 0
    assert all(obj.confidence > DETECTION_THRESHOLD for obj in result.objects)
    assert result.processing_time_ms >= 0.0

    print(f"✓ PASS: {result.object_count} objects in {result.processing_time_ms:.1f}ms")


def test_empty_frame_succeeds_with_sentinel():
    result = build_pipeline().process([])

    assert result.success
    assert result.fusion_outcome == FusionOutcome.empty()
    assert result.object_count == 0


def test_none_frame_is_failed_result():
    result = build_pipeline().process(None)

    assert not result.success
    assert "must not be None" in result.error_message
    assert result.objects == ()


@pytest.mark.parametrize("intruder", [None, "LIDAR-01", 42])
def test_non_reading_element_is_failed_result(intruder):
    result = build_pipeline().process(make_synchronized_readings(1000) + [intruder])

    assert not result.success
    assert "non-reading element" in result.error_message
    assert result.objects == ()


def test_algorithm_failure_becomes_failed_result(caplog):
    print("\n" + "="*70)
    print("TEST: Fusion Failure -> Failed Result")
    print("="*70)

    pipeline = build_pipeline(FailingFusion())

    with caplog.at_level(logging.ERROR):
        result = pipeline.process(make_synchronized_readings(1000))

    assert not result.success
    assert "Failing Fusion" in result.error_message
    # Control characters never reach the message
    assert "\n" not in result.error_message
    assert result.fusion_outcome.is_empty()
    assert "Perception failed" in caplog.text

    print(f"✓ PASS: {result.error_message}")


@pytest.mark.parametrize("sensor_id,threat", [
    ("LIDAR'; DROP TABLE sensors;--", "sql_injection"),
    ("<script>alert(1)</script>", "xss"),
    ("../../etc/passwd", "path_traversal"),
])
def test_security_violation_propagates(sensor_id, threat):
    pipeline = build_pipeline()
    readings = [make_lidar_reading(50, timestamp=1000, sensor_id=sensor_id)]

    with pytest.raises(SecurityViolationError) as excinfo:
        pipeline.process(readings)

    assert excinfo.value.threat == threat


def test_oversized_payload_propagates():
    pipeline = build_pipeline(validator=SecurityValidator(max_data_size=1000))
    readings = [make_camera_reading(100, 100, timestamp=1000)]

    with pytest.raises(SecurityViolationError) as excinfo:
        pipeline.process(readings)

    assert excinfo.value.threat == "oversized_payload"


def test_process_frames_keeps_input_order():
    print("\n" + "="*70)
    print("TEST: Concurrent Frames")
    print("="*70)

    pipeline = build_pipeline(max_workers=4)
    frames = [
        [make_lidar_reading(n * 100, timestamp=1000 + n, sensor_id=f"LIDAR-{n:02d}")]
        for n in range(1, 13)
    ]

    results = pipeline.process_frames(frames)

    assert len(results) == len(frames)
    for n, result in enumerate(results, start=1):
        assert result.success
        assert result.fusion_outcome.total_data_points == n * 100

    print(f"✓ PASS: {len(results)} frames in order")


def test_process_frames_matches_sequential():
    pipeline = build_pipeline(seed=3)
    frames = [make_synchronized_readings(1000 + 100 * i) for i in range(6)]

    concurrent = pipeline.process_frames(frames, max_workers=3)
    sequential = [pipeline.process(frame) for frame in frames]

    assert [r.objects for r in concurrent] == [r.objects for r in sequential]


def test_process_frames_raises_security_violation():
    pipeline = build_pipeline()
    frames = [
        make_synchronized_readings(1000),
        [make_lidar_reading(10, timestamp=1000, sensor_id="<iframe src=x>")],
    ]

    with pytest.raises(SecurityViolationError):
        pipeline.process_frames(frames)


def test_detect_raw():
    pipeline = build_pipeline()
    objects = pipeline.detect_raw(make_lidar_reading(250_000, timestamp=1000))
    assert len(objects) <= 3

    with pytest.raises(InvalidDetectionInputError):
        pipeline.detect_raw(None)

    with pytest.raises(SecurityViolationError):
        pipeline.detect_raw(make_lidar_reading(10, timestamp=1000, sensor_id="x/*y*/"))


def test_from_config():
    auto = PerceptionPipeline.from_config(PerceptionConfig(seed=1))
    assert isinstance(auto.coordinator.algorithm, AdaptiveFusion)
    assert auto.coordinator.sync_window_ms == 50
    assert auto.detector.seed == 1

    result = auto.process([make_lidar_reading(100, timestamp=1000)])
    assert result.fusion_outcome.algorithm_name == ParticleFilterFusion().name

    fixed = PerceptionPipeline.from_config(
        PerceptionConfig(algorithm='kalman', sync_window_ms=20, max_workers=2,
                         detection_threshold=0.6)
    )
    assert isinstance(fixed.coordinator.algorithm, KalmanFilterFusion)
    assert fixed.coordinator.sync_window_ms == 20
    assert fixed.detector.threshold == 0.6
    assert fixed.max_workers == 2


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
