"""Point cloud selection, labelling, scene and camera control."""

__version__ = "1.0.0"
__all__ = ["selection", "cloud_object", "scene_controller", "camera_controller"]