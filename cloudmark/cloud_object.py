"""A point cloud placed in the scene, with selection, labels and visibility."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_POINT_COLOR = (0.8, 0.8, 0.8)
DEFAULT_SELECTION_COLOR = (1.0, 1.0, 0.0)
UNCLASSIFIED = 0


def _empty_mask() -> np.ndarray:
    return np.zeros(0, dtype=np.uint8)


class ColorMode(enum.IntEnum):
    """How the points of a cloud are coloured when drawn."""

    RGB = 0
    FLAT_COLOR = 1
    AXIS_X = 2
    AXIS_Y = 3
    AXIS_Z = 4
    GRADIENT = 5


@dataclass
class PointCloudComponent:
    """Render and annotation state attached to a cloud in the scene.

    ``label_definition`` is any iterable of labels that carry ``id`` and
    ``name`` attributes. When it is missing, ``label_definition_factory``
    (if given) is called to create one.
    """

    visible: bool = True
    color_mode: ColorMode = ColorMode.RGB
    point_size: float = 2.0
    flat_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    selection_color: tuple[float, float, float] = DEFAULT_SELECTION_COLOR
    show_labels: bool = False
    selection_mask: np.ndarray = field(default_factory=_empty_mask)
    visibility_mask: np.ndarray = field(default_factory=_empty_mask)
    labels: np.ndarray = field(default_factory=_empty_mask)
    hidden_labels: set[int] = field(default_factory=set)
    label_definition: Any = None
    label_definition_factory: Callable[[], Any] | None = None


def _parse_cloud(point_cloud) -> tuple[np.ndarray | None, np.ndarray | None]:
    """Split an (N, 3) xyz or (N, 4) xyz+label array into coordinates and labels."""
    if point_cloud is None:
        return None, None
    data = np.asarray(point_cloud, dtype=np.float64)
    if data.size == 0:
        data = data.reshape(0, 3)
    if data.ndim != 2 or data.shape[1] not in (3, 4):
        raise ValueError(f"point cloud must be an (N, 3) or (N, 4) array, got shape {data.shape}")
    xyz = data[:, :3].astype(np.float32)
    if data.shape[1] == 4:
        raw = data[:, 3]
        if np.any(raw < 0) or np.any(raw > 255) or np.any(raw != np.floor(raw)):
            raise ValueError("point labels must be integers in the range 0..255")
        labels = raw.astype(np.uint8)
    else:
        labels = np.zeros(len(xyz), dtype=np.uint8)
    return xyz, labels


def _label_name(definition, label_id: int) -> str:
    if definition is None:
        return "Unknown"
    for label in definition:
        if label.id == label_id:
            return label.name
    return "Unknown"


class PointCloudObject:
    """A named point cloud with its own selection, labels and visibility."""

    def __init__(self, name: str, point_cloud) -> None:
        self.name = name
        self._points, self._point_labels = _parse_cloud(point_cloud)
        self.component: PointCloudComponent | None = None
        self.selected = False
        self.selection_highlight = DEFAULT_SELECTION_COLOR
        self.elapsed = 0.0
        self._visible = True
        self._selected_points: list[int] = []
        self._selected_set: set[int] = set()
        self._original_colors: np.ndarray = np.zeros((0, 3), dtype=np.float32)
        self._current_colors: np.ndarray = np.zeros((0, 3), dtype=np.float32)
        self._has_color_data = False
        logger.info("Created PointCloudObject: %s", name)

    # -- data access -------------------------------------------------------

    @property
    def points(self) -> np.ndarray:
        """Point coordinates as an (N, 3) float32 array."""
        if self._points is None:
            return np.zeros((0, 3), dtype=np.float32)
        return self._points

    @property
    def point_labels(self) -> np.ndarray:
        """Labels stored with the cloud data itself."""
        if self._point_labels is None:
            return _empty_mask()
        return self._point_labels

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def selected_points(self) -> list[int]:
        return list(self._selected_points)

    @property
    def has_colors(self) -> bool:
        return self._has_color_data

    @property
    def colors(self) -> np.ndarray:
        return self._current_colors

    # -- lifecycle ---------------------------------------------------------

    def on_create(self, component: PointCloudComponent | None = None) -> PointCloudComponent:
        """Attach a component (a fresh one if none is given) and set up buffers."""
        self.component = component if component is not None else PointCloudComponent()
        self.component.visible = self._visible
        self._initialize_colors()
        logger.info("PointCloudObject '%s' created with %d points", self.name, self.point_count())
        return self.component

    def on_update(self, delta_time: float) -> float:
        """Advance the object's clock by one frame and return the total time alive."""
        self.elapsed += float(delta_time)
        return self.elapsed

    def on_destroy(self) -> None:
        """Drop the selection and detach the component before the object goes away."""
        logger.info("Destroying PointCloudObject: %s", self.name)
        self._selected_points.clear()
        self._selected_set.clear()
        self.component = None

    # -- appearance --------------------------------------------------------

    def set_visible(self, visible: bool) -> None:
        self._visible = visible
        if self.component is not None:
            self.component.visible = visible

    def set_color_mode(self, mode: ColorMode) -> None:
        if self.component is not None:
            self.component.color_mode = ColorMode(mode)

    def set_point_size(self, size: float) -> None:
        if self.component is not None:
            self.component.point_size = float(size)

    def set_single_color(self, color) -> None:
        if self.component is not None:
            self.component.flat_color = tuple(float(c) for c in color)

    def set_selection_color(self, color) -> None:
        if self.component is not None:
            self.component.selection_color = tuple(float(c) for c in color)

    # -- statistics --------------------------------------------------------

    def point_count(self) -> int:
        return 0 if self._points is None else len(self._points)

    def bounds_min(self) -> np.ndarray:
        if self.point_count() == 0:
            return np.zeros(3, dtype=np.float32)
        return self._points.min(axis=0)

    def bounds_max(self) -> np.ndarray:
        if self.point_count() == 0:
            return np.zeros(3, dtype=np.float32)
        return self._points.max(axis=0)

    def center(self) -> np.ndarray:
        return (self.bounds_min() + self.bounds_max()) * np.float32(0.5)

    def bounding_sphere_radius(self) -> float:
        return float(np.linalg.norm(self.bounds_max() - self.center()))

    # -- point selection ---------------------------------------------------

    def select_points(self, indices: Iterable[int], additive: bool = False) -> None:
        """Select the given visible points, replacing the selection unless additive."""
        indices = list(indices)
        if not additive:
            self._selected_points.clear()
            self._selected_set.clear()
        comp = self.component
        if comp is None:
            return
        count = self.point_count()
        visibility = comp.visibility_mask
        for idx in indices:
            if not 0 <= idx < count:
                continue
            if visibility.size and idx < visibility.size and visibility[idx] == 0:
                continue
            if idx not in self._selected_set:
                self._selected_set.add(idx)
                self._selected_points.append(idx)
        self._update_point_colors()
        logger.info(
            "Object '%s': %d points selected (total: %d)",
            self.name, len(indices), len(self._selected_points),
        )

    def deselect_points(self, indices: Iterable[int]) -> None:
        indices = list(indices)
        for idx in indices:
            if idx in self._selected_set:
                self._selected_set.discard(idx)
                self._selected_points.remove(idx)
        self._update_point_colors()
        logger.info(
            "Object '%s': %d points deselected (remaining: %d)",
            self.name, len(indices), len(self._selected_points),
        )

    def clear_selection(self) -> None:
        self._selected_points.clear()
        self._selected_set.clear()
        if self.component is not None:
            self.component.selection_mask[:] = 0
        logger.info("Object '%s': Selection cleared", self.name)

    def has_selection(self) -> bool:
        return bool(self._selected_points)

    def selection_count(self) -> int:
        return len(self._selected_points)

    # -- labels ------------------------------------------------------------

    def initialize_labels(self) -> None:
        """Copy the cloud's own labels into the component and ensure a label definition."""
        if self._points is None or self.component is None:
            return
        comp = self.component
        if comp.label_definition is None and comp.label_definition_factory is not None:
            comp.label_definition = comp.label_definition_factory()
            logger.info("Created default label definition for '%s'", self.name)
        comp.labels = self.point_labels.copy()
        logger.info("Initialized labels for %d points", self.point_count())

    def assign_label_to_selected(self, label_id: int, overwrite: bool = True) -> int:
        """Give the selected points a label and return how many were labelled.

        Without ``overwrite`` only unclassified points are changed.
        """
        comp = self.component
        if comp is None or not self._selected_points:
            logger.warning("Cannot assign label: no component or no selected points")
            return 0
        if comp.labels.size == 0:
            self.initialize_labels()
        assigned = skipped = 0
        for idx in self._selected_points:
            if idx >= comp.labels.size:
                continue
            if not overwrite and comp.labels[idx] != UNCLASSIFIED:
                skipped += 1
                continue
            comp.labels[idx] = label_id
            assigned += 1
        name = _label_name(comp.label_definition, label_id)
        if not overwrite and skipped:
            logger.info(
                "Assigned label %d (%s) to %d points, skipped %d points with existing labels",
                label_id, name, assigned, skipped,
            )
        else:
            logger.info("Assigned label %d (%s) to %d selected points", label_id, name, assigned)
        return assigned

    def label_definition(self):
        comp = self.component
        if comp is None:
            return None
        if comp.label_definition is None:
            self.initialize_labels()
        return comp.label_definition

    # -- visibility --------------------------------------------------------

    def _ensure_visibility_mask(self, comp: PointCloudComponent) -> int:
        count = self.point_count()
        if comp.visibility_mask.size == 0:
            comp.visibility_mask = np.ones(count, dtype=np.uint8)
        return count

    def _label_matches(self, comp: PointCloudComponent, label_id: int) -> np.ndarray:
        limit = min(self.point_count(), comp.labels.size)
        return np.flatnonzero(comp.labels[:limit] == label_id)

    def hide_label(self, label_id: int) -> int:
        """Hide every point with the label; return how many were hidden."""
        comp = self.component
        if comp is None:
            return 0
        comp.hidden_labels.add(label_id)
        self._ensure_visibility_mask(comp)
        matches = self._label_matches(comp, label_id)
        comp.visibility_mask[matches] = 0
        logger.info("Hidden label %d - %d points hidden", label_id, len(matches))
        return len(matches)

    def show_label(self, label_id: int) -> int:
        """Show every point with the label; return how many were shown."""
        comp = self.component
        if comp is None:
            return 0
        comp.hidden_labels.discard(label_id)
        self._ensure_visibility_mask(comp)
        matches = self._label_matches(comp, label_id)
        comp.visibility_mask[matches] = 1
        logger.info("Shown label %d - %d points shown", label_id, len(matches))
        return len(matches)

    def show_selection(self) -> None:
        """Make only the selected points visible."""
        comp = self.component
        if comp is None:
            return
        count = self.point_count()
        comp.visibility_mask = np.zeros(count, dtype=np.uint8)
        limit = min(comp.selection_mask.size, count)
        comp.visibility_mask[:limit] = (comp.selection_mask[:limit] != 0).astype(np.uint8)
        logger.info(
            "showSelection: %d points visible out of %d", len(self._selected_points), count
        )

    def show_all_labels(self) -> None:
        comp = self.component
        if comp is None:
            return
        comp.hidden_labels.clear()
        comp.visibility_mask = np.ones(self.point_count(), dtype=np.uint8)
        logger.info("All labels shown - %d points visible", self.point_count())

    def hide_all_except_label(self, label_id: int) -> int:
        """Show only points with the label; return how many stay visible."""
        comp = self.component
        if comp is None:
            return 0
        comp.hidden_labels.clear()
        if comp.label_definition is not None:
            comp.hidden_labels.update(
                label.id for label in comp.label_definition if label.id != label_id
            )
        self._ensure_visibility_mask(comp)
        limit = min(self.point_count(), comp.labels.size)
        keep = comp.labels[:limit] == label_id
        comp.visibility_mask[:limit] = keep.astype(np.uint8)
        visible = int(keep.sum())
        logger.info("Showing only label %d - %d points visible", label_id, visible)
        return visible

    def is_label_hidden(self, label_id: int) -> bool:
        if self.component is None:
            return False
        return label_id in self.component.hidden_labels

    # -- internals ---------------------------------------------------------

    def _initialize_colors(self) -> None:
        count = self.point_count()
        if count == 0:
            return
        gray = np.array(DEFAULT_POINT_COLOR, dtype=np.float32)
        self._original_colors = np.tile(gray, (count, 1))
        self._current_colors = self._original_colors.copy()
        self._has_color_data = True
        if self.component is not None and self.component.selection_mask.size < count:
            mask = np.zeros(count, dtype=np.uint8)
            mask[: self.component.selection_mask.size] = self.component.selection_mask
            self.component.selection_mask = mask
        self.initialize_labels()
        logger.info("Initialized color buffers for %d points", count)

    def _update_point_colors(self) -> None:
        if not self._has_color_data or self.component is None:
            return
        count = self.point_count()
        mask = np.zeros(count, dtype=np.uint8)
        valid = [idx for idx in self._selected_points if idx < count]
        mask[valid] = 1
        self.component.selection_mask = mask
        logger.debug("Updated selection mask: %d selected points", len(self._selected_points))