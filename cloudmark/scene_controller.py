"""Owns the point cloud objects in a scene and keeps the camera framed on them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import numpy as np

from cloudmark.cloud_object import PointCloudComponent, PointCloudObject

logger = logging.getLogger(__name__)

DEFAULT_CAMERA_TARGET = (0.0, 0.0, 0.0)
DEFAULT_CAMERA_DISTANCE = 10.0

Loader = Callable[[str], Any]
Saver = Callable[[str, np.ndarray, np.ndarray], Any]


class SceneError(Exception):
    """Raised when a cloud cannot be added, loaded or saved."""


def _normalise_extension(extension: str) -> str:
    extension = extension.lower()
    return extension if extension.startswith(".") else f".{extension}"


class SceneController:
    """Adds, removes, loads and saves point cloud objects.

    ``camera`` needs a ``frame_target(center, radius)`` method.
    ``loaders`` maps a file extension (such as ``".ply"``) to a callable that
    reads a file and returns an (N, 3) or (N, 4) array. ``savers`` maps a
    format name (such as ``"ply"``) to a callable taking the path, the
    (N, 3) coordinates and the per-point labels; it signals failure by
    raising or by returning ``False``.
    """

    def __init__(
        self,
        camera,
        loaders: Mapping[str, Loader] | None = None,
        savers: Mapping[str, Saver] | None = None,
    ) -> None:
        self.camera = camera
        self._loaders = {_normalise_extension(ext): fn for ext, fn in (loaders or {}).items()}
        self._savers = dict(savers or {})
        self._objects: dict[str, PointCloudObject] = {}
        self.default_camera_target = np.array(DEFAULT_CAMERA_TARGET, dtype=np.float32)
        self.default_camera_distance = DEFAULT_CAMERA_DISTANCE
        logger.info("SceneController initialized")

    # -- access ------------------------------------------------------------

    @property
    def objects(self) -> tuple[PointCloudObject, ...]:
        """Objects in the order they were added."""
        return tuple(self._objects.values())

    @property
    def object_count(self) -> int:
        return len(self._objects)

    def get_object(self, name: str) -> PointCloudObject | None:
        return self._objects.get(name)

    def object_at(self, index: int) -> PointCloudObject | None:
        if 0 <= index < len(self._objects):
            return list(self._objects.values())[index]
        return None

    # -- object management -------------------------------------------------

    def add_point_cloud_object(self, name: str, point_cloud) -> PointCloudObject:
        """Create an object for the cloud; names must be unique."""
        if name in self._objects:
            raise SceneError(f"object with name '{name}' already exists")
        obj = PointCloudObject(name, point_cloud)
        obj.on_create(PointCloudComponent())
        self._objects[name] = obj
        logger.info("Added point cloud object '%s' with %d points", name, obj.point_count())
        return obj

    def remove_point_cloud_object(self, name: str) -> None:
        obj = self._objects.pop(name, None)
        if obj is None:
            logger.warning("Object '%s' not found", name)
            return
        obj.on_destroy()
        logger.info("Removed point cloud object '%s'", name)

    def remove_all_objects(self) -> None:
        for obj in self._objects.values():
            obj.on_destroy()
        self._objects.clear()
        logger.info("Removed all objects from scene")

    # -- files -------------------------------------------------------------

    def load_point_cloud_from_file(self, filepath) -> PointCloudObject:
        """Load a cloud by extension, add it under the file's stem and frame it."""
        path = Path(filepath)
        extension = path.suffix.lower()
        logger.info("Loading point cloud from: %s", filepath)
        loader = self._loaders.get(extension)
        if loader is None:
            raise SceneError(f"unsupported file format: {extension or '(none)'}")
        point_cloud = loader(str(filepath))
        if point_cloud is None or np.asarray(point_cloud).size == 0:
            raise SceneError("failed to load point cloud or point cloud is empty")
        name = path.stem
        obj = self.add_point_cloud_object(name, point_cloud)
        self.frame_camera(name)
        logger.info("Successfully loaded point cloud '%s' with %d points", name, obj.point_count())
        return obj

    def save_point_cloud_to_file(self, object_name: str, filepath, format: str = "ply") -> None:
        """Write an object's points and current labels with the saver for ``format``."""
        obj = self.get_object(object_name)
        if obj is None:
            raise SceneError(f"cannot save: object '{object_name}' not found")
        if obj.point_count() == 0:
            raise SceneError("cannot save: point cloud is empty")

        cloud_labels = obj.point_labels
        comp = obj.component
        if comp is not None and comp.labels.size:
            if comp.labels.size != cloud_labels.size:
                logger.error(
                    "Label count (%d) doesn't match point count (%d)",
                    comp.labels.size, cloud_labels.size,
                )
            else:
                cloud_labels[:] = comp.labels
                logger.info("Assigned %d labels to point cloud", comp.labels.size)

        saver = self._savers.get(format)
        if saver is None:
            raise SceneError(f"unsupported save format: {format}")
        logger.info("Saving point cloud '%s' to: %s (format: %s)", object_name, filepath, format)
        if saver(str(filepath), obj.points, cloud_labels.copy()) is False:
            raise SceneError(f"failed to save point cloud to '{filepath}'")
        logger.info("Successfully saved point cloud to '%s'", filepath)

    # -- camera ------------------------------------------------------------

    def frame_camera(self, object_name: str) -> None:
        obj = self.get_object(object_name)
        if obj is None:
            logger.warning("Cannot frame camera: object '%s' not found", object_name)
            return
        self.camera.frame_target(obj.center(), obj.bounding_sphere_radius())
        logger.info("Camera framed on object '%s'", object_name)

    def frame_camera_all(self) -> None:
        if not self._objects:
            logger.warning("No objects to frame camera on")
            return
        global_min = np.min([obj.bounds_min() for obj in self._objects.values()], axis=0)
        global_max = np.max([obj.bounds_max() for obj in self._objects.values()], axis=0)
        center = (global_min + global_max) * np.float32(0.5)
        radius = float(np.linalg.norm(global_max - center))
        self.camera.frame_target(center, radius)
        logger.info("Camera framed on all %d objects", len(self._objects))

    def reset_camera(self) -> None:
        if self._objects:
            self.frame_camera_all()
        else:
            self.camera.frame_target(self.default_camera_target.copy(), self.default_camera_distance)

    # -- frame loop --------------------------------------------------------

    def update(self, delta_time: float) -> None:
        for obj in self._objects.values():
            obj.on_update(delta_time)