"""
Perception pipeline demonstration.
Runs one LiDAR + camera frame through validation, fusion and detection.
"""

import sys
from pathlib import Path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging

from dataset.synthetic import realistic_camera_reading, realistic_lidar_reading
from perception.config import DEFAULT_CONFIG_PATH, load_config
from perception.errors import PerceptionError, SecurityViolationError
from perception.log_utils import configure_logging
from perception.perception_pipeline import PerceptionPipeline


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Autonomous perception pipeline demo")
    parser.add_argument('--config', default=str(DEFAULT_CONFIG_PATH),
                        help="Path to perception_config.yaml")
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help="Overrides log_level from the config file")
    parser.add_argument('--lidar-points', type=int, default=5000,
                        help="Points in the synthetic LiDAR sweep")
    parser.add_argument('--camera-offset-ms', type=int, default=40,
                        help="Camera timestamp offset from the LiDAR sweep")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except PerceptionError as e:
        print(f"✗ {e}")
        return 2

    configure_logging(args.log_level or config.log_level)
    logger = logging.getLogger("perception.demo")
    logger.info("=== Autonomous Perception System Starting ===")

    pipeline = PerceptionPipeline.from_config(config)

    base_time = 1_000
    lidar = realistic_lidar_reading("LIDAR-01", timestamp=base_time,
                                    num_points=args.lidar_points, seed=config.seed)
    camera = realistic_camera_reading("CAM-01",
                                      timestamp=base_time + args.camera_offset_ms,
                                      seed=config.seed)

    logger.info(lidar.metrics_report())
    logger.info(camera.metrics_report())

    try:
        result = pipeline.process([lidar, camera])
    except SecurityViolationError as e:
        logger.error("Security violation (%s): %s", e.threat, e)
        return 3

    if not result.success:
        logger.error("Perception failed: %s", result.error_message)
        return 1

    logger.info("Fusion: %s", result.fusion_outcome)
    for obj in result.objects:
        logger.info("  %s", obj)

    print("\n" + "="*70)
    print(f"✓ {result.object_count} objects detected in "
          f"{result.processing_time_ms:.1f}ms using {result.fusion_outcome.algorithm_name}")
    print("="*70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
