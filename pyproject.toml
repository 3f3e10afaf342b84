[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudmark"
version = "1.0.0"
description = "Point cloud selection, labelling, scene and camera control for annotation tools"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["point cloud", "annotation", "labelling", "lasso selection", "lidar"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cloudmark"]

[tool.pytest.ini_options]
addopts = "-ra"
