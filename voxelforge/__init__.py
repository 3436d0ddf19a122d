"""Voxel shapes, biome formulas, chunked scenes, face-culled meshing and player/camera helpers."""

__version__ = "0.1.0"