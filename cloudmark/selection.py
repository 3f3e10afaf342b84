"""Screen-space point selection with rectangle and lasso tools."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_MIN_RECT_SIZE = 5.0
_MIN_LASSO_STEP_SQ = 4.0
_W_EPSILON = np.float32(1e-6)

Point2 = tuple[float, float]


class SelectionMode(enum.Enum):
    """Shape used to pick points on screen."""

    RECTANGLE = "rectangle"
    LASSO = "lasso"


def _as_polygon(polygon: Iterable[Sequence[float]]) -> list[Point2]:
    return [(float(px), float(py)) for px, py in polygon]


def _polygon_mask(xs: np.ndarray, ys: np.ndarray, polygon: list[Point2]) -> np.ndarray:
    """Even-odd crossing test of every (x, y) against the polygon."""
    inside = np.zeros(xs.shape, dtype=bool)
    if not polygon:
        return inside
    for (xi, yi), (xj, yj) in zip(polygon, polygon[-1:] + polygon[:-1]):
        crosses = (yi > ys) != (yj > ys)
        if yi == yj or not crosses.any():
            continue
        x_at = (xj - xi) * (ys - yi) / (yj - yi) + xi
        inside ^= crosses & (xs < x_at)
    return inside


def point_in_polygon(x: float, y: float, polygon: Iterable[Sequence[float]]) -> bool:
    """Return whether (x, y) lies inside the polygon (even-odd rule).

    Polygons with fewer than three vertices contain nothing.
    """
    vertices = _as_polygon(polygon)
    if len(vertices) < 3:
        return False
    xs = np.array([x], dtype=np.float32)
    ys = np.array([y], dtype=np.float32)
    return bool(_polygon_mask(xs, ys, vertices)[0])


def _as_matrix(view_projection) -> np.ndarray:
    matrix = np.asarray(view_projection, dtype=np.float32)
    if matrix.shape != (4, 4):
        raise ValueError(f"view_projection must be 4x4, got shape {matrix.shape}")
    return matrix


def project_to_screen(
    position: Sequence[float],
    view_projection,
    window_width: int,
    window_height: int,
) -> Point2:
    """Project a world position to window coordinates (origin at top left)."""
    matrix = _as_matrix(view_projection)
    pos = np.asarray(position, dtype=np.float32)
    if pos.shape != (3,):
        raise ValueError("position must have three coordinates")
    clip = matrix @ np.append(pos, np.float32(1.0))
    if abs(clip[3]) > _W_EPSILON:
        clip = clip / clip[3]
    screen_x = (clip[0] + np.float32(1.0)) * np.float32(0.5) * np.float32(window_width)
    screen_y = (np.float32(1.0) - clip[1]) * np.float32(0.5) * np.float32(window_height)
    return float(screen_x), float(screen_y)


def _visible_screen_positions(
    points: np.ndarray, matrix: np.ndarray, window_width: int, window_height: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Indices and screen coordinates of points that fall inside clip space x/y."""
    homogeneous = np.column_stack([points, np.ones(len(points), dtype=np.float32)])
    clip = homogeneous @ matrix.T
    indices = np.flatnonzero(clip[:, 3] > _W_EPSILON)
    clip = clip[indices]
    inv_w = np.float32(1.0) / clip[:, 3]
    ndc_x = clip[:, 0] * inv_w
    ndc_y = clip[:, 1] * inv_w
    in_range = (ndc_x >= -1.0) & (ndc_x <= 1.0) & (ndc_y >= -1.0) & (ndc_y <= 1.0)
    half_width = np.float32(window_width * 0.5)
    half_height = np.float32(window_height * 0.5)
    screen_x = (ndc_x[in_range] + np.float32(1.0)) * half_width
    screen_y = (np.float32(1.0) - ndc_y[in_range]) * half_height
    return indices[in_range], screen_x, screen_y


class SelectionTool:
    """Tracks an in-progress drag and picks the cloud points it encloses."""

    def __init__(self) -> None:
        self.mode = SelectionMode.RECTANGLE
        self._selecting = False
        self._start: Point2 = (0.0, 0.0)
        self._current: Point2 = (0.0, 0.0)
        self._lasso_path: list[Point2] = []

    @property
    def is_selecting(self) -> bool:
        return self._selecting

    @property
    def lasso_path(self) -> list[Point2]:
        return list(self._lasso_path)

    def start_selection(self, x: float, y: float) -> None:
        self._selecting = True
        self._start = (float(x), float(y))
        self._current = self._start
        if self.mode is SelectionMode.LASSO:
            self._lasso_path = [self._start]
        logger.debug("Selection started at (%s, %s)", x, y)

    def update_selection(self, x: float, y: float) -> None:
        if not self._selecting:
            return
        self._current = (float(x), float(y))
        if self.mode is SelectionMode.LASSO and self._lasso_path:
            last_x, last_y = self._lasso_path[-1]
            dist_sq = (x - last_x) ** 2 + (y - last_y) ** 2
            if dist_sq > _MIN_LASSO_STEP_SQ:
                self._lasso_path.append(self._current)

    def end_selection(self) -> None:
        if not self._selecting:
            return
        self._selecting = False
        if self.mode is SelectionMode.LASSO and len(self._lasso_path) > 2:
            self._lasso_path.append(self._lasso_path[0])
        logger.debug("Selection ended at (%s, %s)", *self._current)

    def cancel_selection(self) -> None:
        self._selecting = False
        self._lasso_path.clear()
        logger.debug("Selection cancelled")

    def selection_rect(self) -> tuple[float, float, float, float]:
        """Return the drag rectangle as (x1, y1, x2, y2) with x1 <= x2 and y1 <= y2."""
        (sx, sy), (cx, cy) = self._start, self._current
        return min(sx, cx), min(sy, cy), max(sx, cx), max(sy, cy)

    def select_points(
        self,
        points,
        view_projection,
        window_width: int,
        window_height: int,
        additive: bool = False,
    ) -> list[int]:
        """Return ascending indices of points whose projection falls in the selection.

        ``points`` is an (N, 3) or wider array; extra columns are ignored.
        ``additive`` does not change which points are hit; the caller merges
        the result with any existing selection.
        """
        cloud = np.asarray(points, dtype=np.float32)
        if cloud.size == 0:
            return []
        if cloud.ndim != 2 or cloud.shape[1] < 3:
            raise ValueError(f"points must be an (N, 3) array, got shape {cloud.shape}")
        matrix = _as_matrix(view_projection)
        if self.mode is SelectionMode.RECTANGLE:
            return self._select_rectangle(cloud[:, :3], matrix, window_width, window_height)
        return self._select_lasso(cloud[:, :3], matrix, window_width, window_height)

    def _select_rectangle(self, cloud, matrix, window_width, window_height) -> list[int]:
        x1, y1, x2, y2 = self.selection_rect()
        if abs(x2 - x1) < _MIN_RECT_SIZE or abs(y2 - y1) < _MIN_RECT_SIZE:
            logger.debug("Selection rectangle too small, ignoring")
            return []
        indices, xs, ys = _visible_screen_positions(cloud, matrix, window_width, window_height)
        hit = (xs >= x1) & (xs <= x2) & (ys >= y1) & (ys <= y2)
        selected = indices[hit].tolist()
        logger.info("Rectangle selection: %d points out of %d", len(selected), len(cloud))
        return selected

    def _select_lasso(self, cloud, matrix, window_width, window_height) -> list[int]:
        path = self._lasso_path
        if len(path) < 3:
            logger.debug("Lasso path too small, ignoring")
            return []
        path_x = [px for px, _ in path]
        path_y = [py for _, py in path]
        min_x, max_x = min(path_x), max(path_x)
        min_y, max_y = min(path_y), max(path_y)
        indices, xs, ys = _visible_screen_positions(cloud, matrix, window_width, window_height)
        in_box = (xs >= min_x) & (xs <= max_x) & (ys >= min_y) & (ys <= max_y)
        indices, xs, ys = indices[in_box], xs[in_box], ys[in_box]
        hit = _polygon_mask(xs, ys, path)
        selected = indices[hit].tolist()
        logger.info("Lasso selection: %d points out of %d", len(selected), len(cloud))
        return selected