[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "voxelforge"
version = "0.1.0"
description = "Voxel world generation: orientable voxel shapes, biome formulas, chunked scenes and face-culled meshing"
requires-python = ">=3.10"
dependencies = []
keywords = ["voxel", "terrain", "procedural generation", "meshing", "chunks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["voxelforge*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
