"""
Tests for YAML configuration, logging helpers and run metrics.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import logging

import pandas as pd
import pytest

from dataset.synthetic import make_lidar_reading, make_synchronized_readings
from evaluation.evaluator import AlgorithmEvaluator
from evaluation.metrics import MetricsCollector
from perception.config import DEFAULT_CONFIG_PATH, PerceptionConfig, load_config
from perception.detector import DETECTION_THRESHOLD
from perception.errors import ConfigurationError
from perception.fusion_algorithms import KalmanFilterFusion, WeightedAverageFusion
from perception.log_utils import configure_logging, resolve_logger, sanitize_for_log
from perception.types import FusionOutcome, PerceptionResult


# ========== Configuration ==========

def test_bundled_config_loads():
    print("\n" + "="*70)
    print("TEST: Bundled Configuration")
    print("="*70)

    assert DEFAULT_CONFIG_PATH.exists()
    config = load_config()

    assert config == PerceptionConfig()
    assert config.sync_window_ms == 50
    assert config.algorithm == 'auto'
    assert config.detection_threshold == 0.5
    assert config.seed is None

    print(f"✓ PASS: {config}")


def test_partial_config_uses_defaults(tmp_path):
    path = tmp_path / "perception_config.yaml"
    path.write_text("perception:\n  algorithm: particle\n  seed: 9\n", encoding="utf-8")

    config = load_config(path)

    assert config.algorithm == 'particle'
    assert config.seed == 9
    assert config.sync_window_ms == 50


def test_flat_config_without_section(tmp_path):
    path = tmp_path / "flat.yaml"
    path.write_text("sync_window_ms: 30\n", encoding="utf-8")

    assert load_config(path).sync_window_ms == 30


@pytest.mark.parametrize("content,match", [
    ("perception:\n  colour: blue\n", "Unknown configuration keys"),
    ("perception:\n  algorithm: quantum\n", "algorithm"),
    ("perception:\n  sync_window_ms: -5\n", "sync_window_ms"),
    ("perception:\n  detection_threshold: 1.5\n", "detection_threshold"),
    ("perception:\n  detection_threshold: 0.2\n", "detection_threshold"),
    ("perception:\n  max_workers: 0\n", "max_workers"),
    ("perception:\n  log_level: LOUD\n", "log_level"),
    ("perception: [1, 2]\n", "mapping"),
    ("- just\n- a list\n", "mapping"),
    ("perception: {unclosed\n", "Invalid YAML"),
])
def test_invalid_config_rejected(tmp_path, content, match):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=match):
        load_config(path)


def test_threshold_floor_applies_to_config():
    with pytest.raises(ConfigurationError, match="detection_threshold"):
        PerceptionConfig(detection_threshold=0.2)

    assert PerceptionConfig(detection_threshold=DETECTION_THRESHOLD).detection_threshold == 0.5


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "absent.yaml")


# ========== Logging helpers ==========

def test_sanitize_for_log():
    assert sanitize_for_log(None) == "null"
    assert sanitize_for_log("a\r\nb\tc") == "a__b_c"
    assert len(sanitize_for_log("x" * 500)) == 100
    assert sanitize_for_log(42) == "42"


def test_resolve_logger():
    injected = logging.getLogger("tests.injected")
    assert resolve_logger(injected, "ignored") is injected
    assert resolve_logger(None, "perception.detector").name == "perception.detector"


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ConfigurationError):
        configure_logging("CHATTY")


# ========== Metrics ==========

def test_metrics_collector():
    print("\n" + "="*70)
    print("TEST: Metrics Collection")
    print("="*70)

    collector = MetricsCollector("unit")
    ok = PerceptionResult(objects=(), fusion_outcome=FusionOutcome("k", 100, 0.9, 2),
                          processing_time_ms=2.0)
    failed = PerceptionResult.failed("boom", 4.0)

    collector.update(ok)
    collector.update(failed)
    metrics = collector.finalize()

    assert metrics.frames == 2
    assert metrics.successful_frames == 1
    assert metrics.success_rate == pytest.approx(0.5)
    assert metrics.total_objects == 0
    assert metrics.avg_fusion_confidence == pytest.approx(0.9)
    assert metrics.avg_sensor_count == pytest.approx(2.0)
    assert metrics.avg_processing_time_ms == pytest.approx(3.0)

    df = collector.to_dataframe()
    assert isinstance(df, pd.DataFrame)
    assert list(df['success']) == [True, False]
    assert df.loc[1, 'error_message'] == "boom"

    print(f"✓ PASS: {metrics.frames} frames, success rate {metrics.success_rate:.0%}")


def test_empty_collector():
    metrics = MetricsCollector("nothing").finalize()
    assert metrics.frames == 0
    assert metrics.class_counts == {}


# ========== Evaluator ==========

def test_evaluator_compares_algorithms():
    print("\n" + "="*70)
    print("TEST: Algorithm Comparison")
    print("="*70)

    frames = [make_synchronized_readings(1000 + 100 * i) for i in range(4)]
    evaluator = AlgorithmEvaluator(seed=3)

    results = evaluator.compare([KalmanFilterFusion(), WeightedAverageFusion()], frames)

    assert set(results) == {"KalmanFilterFusion", "Weighted Average Fusion"}
    kalman = results["KalmanFilterFusion"]
    average = results["Weighted Average Fusion"]

    assert kalman.frames == 4 and kalman.success_rate == 1.0
    assert kalman.avg_fusion_confidence == pytest.approx(0.95)
    assert average.avg_fusion_confidence == pytest.approx(0.80)
    assert kalman.total_objects > 0
    assert kalman.avg_object_confidence > DETECTION_THRESHOLD
    assert sum(kalman.class_counts.values()) == kalman.total_objects

    print(f"✓ PASS: kalman {kalman.avg_objects_per_frame:.1f} objects/frame")


def test_detection_scaling_grows_with_data():
    evaluator = AlgorithmEvaluator(seed=0)
    means = evaluator.detection_scaling([0, 20_000, 100_000], confidence=0.9, trials=20)

    assert len(means) == 3
    assert means[0] <= means[1] <= means[2]


def test_evaluator_single_stream_frames():
    frames = [[make_lidar_reading(500, timestamp=1000 + i)] for i in range(3)]
    metrics = AlgorithmEvaluator().evaluate_algorithm(WeightedAverageFusion(), frames)

    assert metrics.frames == 3
    assert metrics.avg_sensor_count == pytest.approx(1.0)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
