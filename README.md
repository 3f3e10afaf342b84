# cloudmark

This package provides the logic for interactive point cloud annotation. It
sits between a viewer and the point data. It uses numpy and nothing else.

- `cloudmark.selection` handles rectangle and lasso selection in screen
  space. `SelectionTool` records a drag and then picks the points whose
  projection through a 4x4 view-projection matrix falls inside the shape.
  `point_in_polygon` and `project_to_screen` can also be called as plain
  functions.
- `cloudmark.cloud_object` provides `PointCloudObject`, a named cloud. It
  tracks which points are selected, the label of each point, and which
  labels are visible. Render and annotation state lives in a
  `PointCloudComponent`: visibility, `ColorMode`, point size, flat and
  selection colours, and the selection, visibility and label arrays.
- `cloudmark.scene_controller` provides `SceneController`. It keeps objects
  by name in the order they were added, loads and saves clouds through
  callables that you supply, and frames a camera on one object or on all of
  them. Failures raise `SceneError`.
- `cloudmark.camera_controller` provides `CameraController`. It turns mouse
  buttons, mouse motion, scrolling and held keys into orbit or FPS camera
  calls. It uses the enums `CameraMode`, `MouseButton` and `Key`.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Selecting points

```python
import numpy as np
from cloudmark.selection import SelectionTool, SelectionMode

tool = SelectionTool()
tool.mode = SelectionMode.LASSO
tool.start_selection(100, 100)
for x, y in [(700, 100), (700, 500), (100, 500)]:
    tool.update_selection(x, y)
tool.end_selection()

points = np.random.uniform(-1, 1, size=(1000, 3))
indices = tool.select_points(points, np.eye(4), 800, 600)
```

`select_points` takes an (N, 3) array, or a wider one whose extra columns are
ignored. It returns the indices of the hit points in ascending order.

Some inputs select nothing:

- A point whose clip-space `w` is not above `1e-6` is skipped.
- A point whose normalised x or y falls outside `[-1, 1]` is skipped.
- A rectangle less than 5 pixels wide or less than 5 pixels high selects
  nothing.
- A lasso adds a path point only when the mouse has moved more than 2 pixels
  since the last one. It needs at least three path points to select
  anything.
- `end_selection` closes a lasso of more than two points back to its start.

The `additive` flag does not change which points are hit. To merge a result
into an existing selection, pass the flag on to the object, as shown below.

## Labelling

```python
import numpy as np
from cloudmark.cloud_object import PointCloudObject, PointCloudComponent

cloud = np.array([[0, 0, 0, 0], [1, 0, 0, 2], [0, 1, 0, 0]], dtype=float)
obj = PointCloudObject("scan", cloud)      # (N, 3) xyz or (N, 4) xyz + label
obj.on_create(PointCloudComponent())
obj.select_points([0, 1, 2], False)
obj.assign_label_to_selected(3, False)     # returns 2: point 1 keeps label 2
obj.clear_selection()
obj.hide_label(3)                          # returns how many points were hidden
```

Labels in the fourth column must be whole numbers from 0 to 255. Label 0
means unclassified.

- If `overwrite` is false, `assign_label_to_selected` changes only points
  that are still unclassified.
- `select_points` ignores indices outside the cloud and points that the
  visibility mask hides.
- `show_label`, `show_all_labels`, `hide_all_except_label` and
  `show_selection` rebuild the visibility mask.
- `is_label_hidden` reports whether a label is in the hidden set.

A label definition is any iterable of objects that have `id` and `name`
attributes. Store it in `PointCloudComponent.label_definition`, or supply a
`label_definition_factory` that creates one when it is first needed.

## Scene and camera

```python
from cloudmark.scene_controller import SceneController

scene = SceneController(camera, loaders={".ply": read_ply}, savers={"ply": write_ply})
obj = scene.load_point_cloud_from_file("data/street.ply")   # object named "street"
scene.save_point_cloud_to_file("street", "out/street.ply", "ply")
```

- The camera must have a `frame_target(center, radius)` method.
- A loader receives the path. It returns an (N, 3) or (N, 4) array.
- Loader keys are file extensions and are matched case-insensitively.
- A saver receives the path, the coordinates and the current labels. It
  signals failure by raising or by returning `False`.

`SceneController` raises `SceneError` in these cases:

- two objects are given the same name;
- no loader exists for the extension;
- the loaded cloud is empty;
- no saver exists for the format;
- a save fails.

`reset_camera` frames all objects. With an empty scene it frames the origin
at a distance of 10.

`CameraController(camera, is_key_pressed)` works in two modes.

- Orbit mode:
  - dragging with the left button rotates;
  - the middle button, or Shift with the left button, pans;
  - the right button, or Ctrl with the left button, zooms;
  - the wheel zooms.
- FPS mode:
  - dragging with the right button turns the view;
  - the wheel calls `process_mouse_scroll`;
  - `on_update` moves the camera with W/A/S/D, E or Space for up, and Q or
    left Ctrl for down.

## What this package does not do

The package has no window, renderer, menus or command-line program. It
cannot read or write any point cloud file format by itself: loaders and
savers must be supplied. It has no camera implementation and no built-in
label sets. It works with objects you provide that have the methods named
above.