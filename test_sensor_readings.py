"""
Unit tests for the sensor reading value types and pipeline output types.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import dataclasses

import numpy as np
import pytest

from dataset.synthetic import (
    make_camera_reading,
    make_lidar_reading,
    make_synchronized_readings,
    realistic_camera_reading,
)
from perception.errors import InvalidInputError
from perception.sensor_data import (
    MAX_LIDAR_POINTS,
    CameraReading,
    LidarReading,
    SensorKind,
)
from perception.types import (
    DetectedObject,
    FusionOutcome,
    ObjectClass,
    PerceptionResult,
    Position3D,
)


def empty_lidar(timestamp=1000):
    return LidarReading(timestamp=timestamp, sensor_id="LIDAR-EMPTY",
                        x=[], y=[], z=[], intensity=[])


def test_lidar_length_mismatch_fails_at_construction():
    print("\n" + "="*70)
    print("TEST: LiDAR Array Length Mismatch")
    print("="*70)

    with pytest.raises(InvalidInputError, match="identical lengths"):
        LidarReading(timestamp=1000, sensor_id="LIDAR-01",
                     x=[1.0, 2.0, 3.0], y=[1.0, 2.0], z=[0.0, 0.0, 0.0],
                     intensity=[1.0, 1.0, 1.0])

    print("✓ PASS: mismatch raises before any pipeline stage")


def test_lidar_rejects_missing_array():
    with pytest.raises(InvalidInputError):
        LidarReading(timestamp=1000, sensor_id="LIDAR-01",
                     x=None, y=[1.0], z=[1.0], intensity=[1.0])


@pytest.mark.parametrize("timestamp", [0, -5, 1.5, True, "1000"])
def test_timestamp_must_be_positive_integer(timestamp):
    with pytest.raises(InvalidInputError):
        LidarReading(timestamp=timestamp, sensor_id="LIDAR-01",
                     x=[1.0], y=[1.0], z=[1.0], intensity=[1.0])


@pytest.mark.parametrize("sensor_id", ["", "   ", None])
def test_sensor_id_must_be_non_empty(sensor_id):
    with pytest.raises(InvalidInputError):
        make_camera_reading(timestamp=1000, sensor_id=sensor_id)


def test_lidar_metrics():
    print("\n" + "="*70)
    print("TEST: LiDAR Metrics")
    print("="*70)

    reading = LidarReading(timestamp=1000, sensor_id="LIDAR-01",
                           x=[3.0, 0.0], y=[4.0, 0.0], z=[0.0, 1.0],
                           intensity=[100.0, 200.0])

    assert reading.sensor_kind is SensorKind.LIDAR
    assert reading.point_count == 2
    assert reading.data_size() == 2
    assert reading.max_range == pytest.approx(5.0)
    assert reading.average_intensity == pytest.approx(150.0)
    assert reading.is_valid()
    assert "Points: 2" in reading.metrics_report()

    near = reading.points_in_range(0.0, 1.0)
    assert near.shape == (1, 4)

    print(f"✓ PASS: {reading.metrics_report()}")


def test_empty_lidar_is_invalid():
    reading = empty_lidar()
    assert reading.point_count == 0
    assert reading.max_range == 0.0
    assert reading.average_intensity == 0.0
    assert not reading.is_valid()


def test_lidar_with_all_points_at_origin_is_invalid():
    reading = LidarReading(timestamp=1000, sensor_id="LIDAR-01",
                           x=[0.0, 0.0], y=[0.0, 0.0], z=[0.0, 0.0],
                           intensity=[1.0, 1.0])
    assert not reading.is_valid()


def test_lidar_point_limit():
    assert MAX_LIDAR_POINTS == 2_000_000
    assert make_lidar_reading(1000, timestamp=1000).is_valid()


def test_readings_are_immutable():
    reading = make_lidar_reading(10, timestamp=1000)

    with pytest.raises(dataclasses.FrozenInstanceError):
        reading.timestamp = 2000

    with pytest.raises(ValueError):
        reading.x[0] = 99.0


def test_lidar_copies_caller_arrays():
    xs = np.array([1.0, 2.0])
    reading = LidarReading(timestamp=1000, sensor_id="LIDAR-01",
                           x=xs, y=[1.0, 1.0], z=[0.0, 0.0], intensity=[1.0, 1.0])
    xs[0] = 50.0
    assert reading.x[0] == pytest.approx(1.0)


def test_camera_metrics():
    print("\n" + "="*70)
    print("TEST: Camera Metrics")
    print("="*70)

    reading = make_camera_reading(100, 100, timestamp=1000)

    assert reading.sensor_kind is SensorKind.CAMERA
    assert reading.data_size() == 100 * 100 * 3
    assert reading.is_valid()

    # Gradient 0..255 repeats; first 1000 bytes average to 127
    stats = reading.statistics()
    assert stats.width == 100 and stats.height == 100
    assert 0 <= stats.brightness <= 255
    assert stats.contrast == pytest.approx(255.0)

    print(f"✓ PASS: {stats}")


def test_camera_full_hd():
    reading = realistic_camera_reading("CAM-01", timestamp=1040, seed=3)
    assert reading.data_size() == 1920 * 1080 * 3
    assert 64 <= reading.brightness <= 191
    assert reading.is_valid()
    assert "1920x1080" in reading.metrics_report()


def test_camera_rejects_bad_geometry():
    with pytest.raises(InvalidInputError):
        CameraReading(timestamp=1000, sensor_id="CAM-01", pixels=b"", width=0, height=10)

    with pytest.raises(InvalidInputError, match="expected"):
        CameraReading(timestamp=1000, sensor_id="CAM-01", pixels=bytes(10),
                      width=2, height=2)


def test_camera_without_pixels_is_invalid():
    reading = CameraReading(timestamp=1000, sensor_id="CAM-01", pixels=None,
                            width=4, height=4)
    assert reading.data_size() == 0
    assert reading.brightness == 0
    assert not reading.is_valid()


def test_synchronized_readings_share_timestamp():
    lidar, camera = make_synchronized_readings(5000)
    assert lidar.timestamp == camera.timestamp == 5000
    assert lidar.point_count == 50
    assert camera.brightness == 0
    assert lidar.is_valid() and camera.is_valid()


def test_fusion_outcome_sentinel():
    empty = FusionOutcome.empty()

    assert empty == FusionOutcome.empty()
    assert empty.is_empty()
    assert not empty.is_valid()
    assert empty.algorithm_name == "None"

    # A genuine zero-confidence outcome is not the sentinel
    weak = FusionOutcome("KalmanFilterFusion", 0, 0.0, 1)
    assert weak != empty
    assert not weak.is_empty()


def test_fusion_outcome_validation():
    with pytest.raises(ValueError):
        FusionOutcome("x", 10, 1.5, 1)
    with pytest.raises(ValueError):
        FusionOutcome("x", -1, 0.5, 1)
    with pytest.raises(ValueError):
        FusionOutcome("x", 10, 0.5, -1)


def test_detected_object_validation():
    position = Position3D(1.0, 2.0, 0.5)
    obj = DetectedObject("OBJ_0", ObjectClass.VEHICLE, 0.8, position)
    assert "VEHICLE" in str(obj)

    with pytest.raises(ValueError):
        DetectedObject("OBJ_1", ObjectClass.VEHICLE, 1.2, position)
    with pytest.raises(TypeError):
        DetectedObject("OBJ_2", "vehicle", 0.8, position)
    with pytest.raises(ValueError):
        Position3D(float('nan'), 0.0, 0.0)


def test_perception_result_failure_shape():
    failed = PerceptionResult.failed("boom", 1.5)
    assert not failed.success
    assert failed.object_count == 0
    assert failed.fusion_outcome.is_empty()

    with pytest.raises(ValueError):
        PerceptionResult(objects=(), fusion_outcome=FusionOutcome.empty(),
                         processing_time_ms=0.0, success=False)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
