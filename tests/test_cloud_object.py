from dataclasses import dataclass

import numpy as np
import pytest

from cloudmark.cloud_object import ColorMode, PointCloudComponent, PointCloudObject


@dataclass
class _Label:
    id: int
    name: str


def _label_set():
    return [_Label(0, "Unclassified"), _Label(1, "Ground"), _Label(2, "Vegetation")]


def _cloud():
    return np.array(
        [
            [0.0, 0.0, 0.0, 0],
            [1.0, 0.0, 0.0, 1],
            [0.0, 2.0, 0.0, 1],
            [0.0, 0.0, 3.0, 2],
            [-1.0, -2.0, -3.0, 0],
        ]
    )


@pytest.fixture
def obj():
    o = PointCloudObject("cloud", _cloud())
    o.on_create(PointCloudComponent(label_definition_factory=_label_set))
    return o


def test_labels_copied_from_cloud(obj):
    assert obj.component.labels.tolist() == [0, 1, 1, 2, 0]
    assert obj.point_count() == 5


def test_bounds_and_center(obj):
    assert obj.bounds_min().tolist() == [-1.0, -2.0, -3.0]
    assert obj.bounds_max().tolist() == [1.0, 2.0, 3.0]
    assert obj.center().tolist() == [0.0, 0.0, 0.0]
    assert obj.bounding_sphere_radius() == pytest.approx(np.sqrt(14.0))


def test_empty_object_defaults():
    o = PointCloudObject("none", None)
    assert o.point_count() == 0
    assert o.bounds_min().tolist() == [0.0, 0.0, 0.0]
    assert o.bounding_sphere_radius() == 0.0
    assert o.label_definition() is None
    assert o.is_label_hidden(1) is False


def test_default_colors(obj):
    assert obj.has_colors
    assert obj.colors.shape == (5, 3)
    assert np.allclose(obj.colors, 0.8)


def test_select_and_mask(obj):
    obj.select_points([1, 3, 3, 99])
    assert obj.selected_points == [1, 3]
    assert obj.component.selection_mask.tolist() == [0, 1, 0, 1, 0]
    assert obj.selection_count() == 2


def test_select_replaces_unless_additive(obj):
    obj.select_points([0])
    obj.select_points([2])
    assert obj.selected_points == [2]
    obj.select_points([4], additive=True)
    assert obj.selected_points == [2, 4]


def test_deselect_and_clear(obj):
    obj.select_points([0, 1, 2])
    obj.deselect_points([1])
    assert obj.selected_points == [0, 2]
    assert obj.component.selection_mask.tolist() == [1, 0, 1, 0, 0]
    obj.clear_selection()
    assert not obj.has_selection()
    assert obj.component.selection_mask.sum() == 0


def test_hidden_points_not_selectable(obj):
    obj.hide_label(1)
    obj.select_points([0, 1, 2, 3])
    assert obj.selected_points == [0, 3]


def test_select_without_component_clears_only():
    o = PointCloudObject("loose", _cloud())
    o.select_points([1, 2])
    assert o.selected_points == []


def test_assign_label_overwrite(obj):
    obj.select_points([0, 1])
    assert obj.assign_label_to_selected(2) == 2
    assert obj.component.labels.tolist() == [2, 2, 1, 2, 0]


def test_assign_label_preserves_existing(obj):
    obj.select_points([0, 1, 4])
    assert obj.assign_label_to_selected(2, overwrite=False) == 2
    assert obj.component.labels.tolist() == [2, 1, 1, 2, 2]


def test_assign_without_selection_does_nothing(obj):
    assert obj.assign_label_to_selected(2) == 0
    assert obj.component.labels.tolist() == [0, 1, 1, 2, 0]


def test_hide_and_show_label(obj):
    assert obj.hide_label(1) == 2
    assert obj.component.visibility_mask.tolist() == [1, 0, 0, 1, 1]
    assert obj.is_label_hidden(1)
    assert obj.show_label(1) == 2
    assert obj.component.visibility_mask.tolist() == [1, 1, 1, 1, 1]
    assert not obj.is_label_hidden(1)


def test_hide_all_except_label(obj):
    assert obj.hide_all_except_label(1) == 2
    assert obj.component.visibility_mask.tolist() == [0, 1, 1, 0, 0]
    assert obj.component.hidden_labels == {0, 2}
    obj.show_all_labels()
    assert obj.component.hidden_labels == set()
    assert obj.component.visibility_mask.tolist() == [1] * 5


def test_show_selection(obj):
    obj.select_points([2, 4])
    obj.show_selection()
    assert obj.component.visibility_mask.tolist() == [0, 0, 1, 0, 1]


def test_label_definition_created_by_factory(obj):
    names = [label.name for label in obj.label_definition()]
    assert names == ["Unclassified", "Ground", "Vegetation"]


def test_appearance_setters(obj):
    obj.set_visible(False)
    obj.set_color_mode(ColorMode.FLAT_COLOR)
    obj.set_point_size(4)
    obj.set_single_color([0.1, 0.2, 0.3])
    obj.set_selection_color((0.0, 1.0, 0.0))
    comp = obj.component
    assert comp.visible is False and obj.visible is False
    assert comp.color_mode is ColorMode.FLAT_COLOR
    assert comp.point_size == 4.0
    assert comp.flat_color == (0.1, 0.2, 0.3)
    assert comp.selection_color == (0.0, 1.0, 0.0)


def test_color_mode_order_fixed():
    assert ColorMode(1) is ColorMode.FLAT_COLOR
    assert [m.name for m in ColorMode][:2] == ["RGB", "FLAT_COLOR"]


def test_plain_xyz_cloud_is_unclassified():
    o = PointCloudObject("xyz", [[0, 0, 0], [1, 1, 1]])
    o.on_create()
    assert o.component.labels.tolist() == [0, 0]


@pytest.mark.parametrize("bad", [[[1, 2]], [[0, 0, 0, 300]], [[0, 0, 0, 1.5]]])
def test_invalid_cloud_rejected(bad):
    with pytest.raises(ValueError):
        PointCloudObject("bad", bad)