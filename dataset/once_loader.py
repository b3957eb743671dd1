"""
Loads ONCE-format scene annotations into sensor readings.

An annotation file is a JSON object:

    {
      "scene_id": "000027",
      "frame_id": "1616100800400",
      "timestamp": 1616100800400,          # optional, ms
      "lidar_points": 68000,
      "annos": {                           # optional
        "names": ["Car", "Pedestrian"],
        "boxes_3d": [[x, y, z, l, w, h, yaw], ...]
      }
    }

Raw point clouds are not shipped with the annotations, so
build_lidar_reading() generates a seeded synthetic cloud with the
declared number of points.
"""

import json
import logging
import time
import zlib
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from perception.errors import InvalidInputError
from perception.log_utils import resolve_logger, sanitize_for_log
from perception.sensor_data import LidarReading
from security.security_validator import SecurityValidator

BOX_FIELDS = 7  # x, y, z, l, w, h, yaw


@dataclass(frozen=True)
class SceneAnnotation:
    """
    One annotated ONCE frame.

    Field Guarantees:
        - scene_id: non-empty
        - lidar_points: >= 0
        - object_names / boxes_3d: equal length, each box has 7 floats
    """

    scene_id: str
    frame_id: str
    timestamp: int
    lidar_points: int
    object_names: Tuple[str, ...] = ()
    boxes_3d: Tuple[Tuple[float, ...], ...] = ()

    def __post_init__(self):
        """Validate invariants at construction time."""
        if not self.scene_id:
            raise InvalidInputError("Scene ID cannot be null or empty")

        if self.lidar_points < 0:
            raise InvalidInputError("LiDAR point count cannot be negative")

        names = tuple(self.object_names)
        boxes = tuple(tuple(float(v) for v in box) for box in self.boxes_3d)
        if len(names) != len(boxes):
            raise InvalidInputError(
                f"Object names and boxes_3d must have equal length. "
                f"names={len(names)} boxes={len(boxes)}"
            )
        for box in boxes:
            if len(box) != BOX_FIELDS:
                raise InvalidInputError(
                    f"Each box_3d must have {BOX_FIELDS} values [x,y,z,l,w,h,yaw], "
                    f"got {len(box)}"
                )

        object.__setattr__(self, 'object_names', names)
        object.__setattr__(self, 'boxes_3d', boxes)

    @property
    def annotation_count(self) -> int:
        return len(self.object_names)

    def class_counts(self) -> Dict[str, int]:
        """Annotated objects per class name."""
        return dict(Counter(self.object_names))

    def __str__(self) -> str:
        return (f"SceneAnnotation[scene={self.scene_id}, frame={self.frame_id}, "
                f"points={self.lidar_points}, objects={self.annotation_count}]")


class OnceDatasetLoader:
    """
    Parses ONCE annotation files and builds LiDAR readings from them.
    """

    def __init__(self, validator: SecurityValidator, seed: int = 42,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize loader

        Args:
            validator: Security gate applied to every source name
            seed: Seed for synthetic point clouds
            logger: Logger to report on; defaults to this module's logger
        """
        if validator is None:
            raise InvalidInputError("SecurityValidator cannot be None")

        self.validator = validator
        self.seed = seed
        self.logger = resolve_logger(logger, __name__)

    def load_annotation(self, path: Union[str, Path]) -> SceneAnnotation:
        """
        Parse one annotation file

        Raises:
            SecurityViolationError: the file name matches an attack pattern
            InvalidInputError: malformed JSON or missing required fields
            FileNotFoundError: path does not exist
        """
        path = Path(path)
        self.validator.validate_sensor_id(path.stem)

        self.logger.info("Loading ONCE annotation from: %s", sanitize_for_log(path.name))

        with open(path, 'r', encoding='utf-8') as f:
            try:
                root = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidInputError(f"Invalid JSON in {path.name}: {e}") from e

        return self.parse_annotation(root, source=path.name)

    def parse_annotation(self, root: dict, source: str = "<memory>") -> SceneAnnotation:
        """Build a SceneAnnotation from an already decoded JSON object."""
        if not isinstance(root, dict):
            raise InvalidInputError(f"Annotation root must be an object in: {source}")

        scene_id = str(self._required(root, 'scene_id', source))
        frame_id = str(self._required(root, 'frame_id', source))
        lidar_points = self._as_int(self._required(root, 'lidar_points', source),
                                    'lidar_points', source)
        timestamp = self._as_int(root.get('timestamp') or time.time() * 1000,
                                 'timestamp', source)

        annos = root.get('annos') or {}
        names = annos.get('names') or []
        boxes = annos.get('boxes_3d') or []

        annotation = SceneAnnotation(
            scene_id=scene_id,
            frame_id=frame_id,
            timestamp=timestamp,
            lidar_points=lidar_points,
            object_names=tuple(str(name) for name in names),
            boxes_3d=tuple(tuple(box) for box in boxes),
        )

        self.logger.info("Loaded scene %s: %d LiDAR points, %d annotated objects",
                         sanitize_for_log(scene_id), lidar_points,
                         annotation.annotation_count)
        return annotation

    def load_directory(self, directory: Union[str, Path]) -> List[SceneAnnotation]:
        """Load every *.json annotation in directory, sorted by file name."""
        directory = Path(directory)
        if not directory.is_dir():
            raise InvalidInputError(f"Not a directory: {directory}")

        return [self.load_annotation(path) for path in sorted(directory.glob("*.json"))]

    def build_lidar_reading(self, annotation: SceneAnnotation) -> LidarReading:
        """
        Synthetic LiDAR reading with the annotation's declared point count

        Points: x ∈ [-50, 50), y ∈ [0, 80), z ∈ [0, 5), intensity ∈ [0, 255).
        The cloud depends only on the loader seed and the scene id.
        """
        n = annotation.lidar_points
        self.logger.info("Building LiDAR reading with %d points for scene %s",
                         n, sanitize_for_log(annotation.scene_id))

        scene_key = zlib.crc32(annotation.scene_id.encode("utf-8"))
        rng = np.random.default_rng([self.seed, scene_key])
        return LidarReading(
            timestamp=annotation.timestamp,
            sensor_id=f"ONCE-LIDAR-{annotation.scene_id}",
            x=(rng.random(n) - 0.5) * 100.0,
            y=rng.random(n) * 80.0,
            z=rng.random(n) * 5.0,
            intensity=rng.random(n) * 255.0,
        )

    @staticmethod
    def _required(root: dict, key: str, source: str):
        value = root.get(key)
        if value is None:
            raise InvalidInputError(f"Required field '{key}' missing in: {source}")
        return value

    @staticmethod
    def _as_int(value, key: str, source: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(
                f"Field '{key}' must be an integer in: {source}, got {sanitize_for_log(value)}"
            ) from e
