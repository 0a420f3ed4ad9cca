"""
Minimap derivative of a world document.

Builds a downsampled grid (nearest zone per cell, dominant terrain with a
density class, structures and roads on top) and renders it to PNG images of
one or more pixel sizes.
"""

import json
from pathlib import Path as FilePath
from typing import Dict, List, Optional, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..config.themes import DEFAULT_ZONE_COLOR, hex_to_rgb
from .models import WorldDocument

logger = structlog.get_logger()

# Cell kinds, later kinds drawn over earlier ones
EMPTY, ZONE, TERRAIN, STRUCTURE, PATH = 0, 1, 2, 3, 4
CELL_KINDS = ("empty", "zone", "terrain", "structure", "path")

# Terrain classes
NO_TERRAIN, FOREST, MOUNTAINS, WATER, LAVA, ROCKY = 0, 1, 2, 3, 4, 5
TERRAIN_NAMES = ("none", "forest", "mountains", "water", "lava", "rocky")

TERRAIN_COLORS = {
    FOREST: "#0d4d0d",
    MOUNTAINS: "#4d4d4d",
    WATER: "#0077be",
    LAVA: "#ff4500",
    ROCKY: "#696969",
}
TERRAIN_PALETTE_ROLES = {
    FOREST: ("foliage", "vegetation"),
    MOUNTAINS: ("snow", "stone"),
    WATER: ("water",),
    LAVA: ("lava",),
    ROCKY: ("rock", "stone"),
}

STRUCTURE_COLORS = {
    "village": "#1a5c1a",
    "tower": "#8c3c00",
    "ruins": "#8c8c8c",
    "darkSanctum": "#4a0082",
    "mountain_shrine": "#c9a83b",
}
DEFAULT_STRUCTURE_COLOR = "#ff0000"
PATH_COLOR = "#ffffff"
BACKGROUND_COLOR = "#000000"

# Environment types counted per terrain class
_TERRAIN_TYPES = {
    "tree": "trees",
    "tree_cluster": "trees",
    "rock": "rocks",
    "boulder": "rocks",
    "water": "water",
    "pond": "water",
    "mountain": "mountains",
    "hill": "mountains",
    "lava": "lava",
    "lava_pool": "lava",
}


class MinimapOptions(BaseModel):
    """Minimap options."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    resolution: int = Field(default=200, ge=8, description="Grid cells per side")
    image_resolutions: List[int] = Field(default=[256], description="PNG sizes in pixels")


def _rgb(hex_color: str) -> np.ndarray:
    return np.array(hex_to_rgb(hex_color), dtype=np.float64)


class MinimapGenerator:
    """Derives minimap data and images from a world document."""

    def __init__(self, document: WorldDocument, options: Optional[MinimapOptions] = None):
        self.document = document
        self.options = options or MinimapOptions()
        self.map_size = document.metadata.size
        self.half_size = self.map_size / 2
        self.grid_size = self.options.resolution
        self.cell_size = self.map_size / self.grid_size

        shape = (self.grid_size, self.grid_size)
        self.kinds = np.zeros(shape, dtype=np.int8)
        self.zone_ids = np.full(shape, -1, dtype=np.int32)
        self.terrain = np.zeros(shape, dtype=np.int8)
        self.density = np.zeros(shape, dtype=np.float64)
        self.structure_ids = np.full(shape, -1, dtype=np.int32)

        self.zones: List[dict] = []
        self.structures: List[dict] = []
        self.paths: List[dict] = []
        self._built = False

    def _to_grid(self, x: float, z: float) -> Optional[Tuple[int, int]]:
        gx = int(np.floor((x + self.half_size) / self.cell_size))
        gy = int(np.floor((z + self.half_size) / self.cell_size))
        if 0 <= gx < self.grid_size and 0 <= gy < self.grid_size:
            return gx, gy
        return None

    def build(self) -> "MinimapGenerator":
        """Fill the grid layers in drawing order."""
        if not self._built:
            self._process_zones()
            self._process_environment()
            self._process_structures()
            self._process_paths()
            self._built = True
        return self

    def _process_zones(self) -> None:
        centers = []
        for zone in self.document.zones:
            position = zone.position or zone.center
            if position is None:
                continue
            self.zones.append(
                {
                    "id": zone.id,
                    "type": zone.type,
                    "position": position.to_dict(),
                    "radius": zone.radius,
                    "color": zone.color,
                }
            )
            centers.append((position.x, position.z))

        if not centers:
            return

        coords = (np.arange(self.grid_size) + 0.5) * self.cell_size - self.half_size
        world_x, world_z = np.meshgrid(coords, coords)
        centers_arr = np.array(centers)
        dx = world_x[..., None] - centers_arr[:, 0]
        dz = world_z[..., None] - centers_arr[:, 1]
        self.zone_ids = np.argmin(dx * dx + dz * dz, axis=-1).astype(np.int32)
        self.kinds[:] = ZONE

    def _process_environment(self) -> None:
        shape = (self.grid_size, self.grid_size)
        counts = {name: np.zeros(shape, dtype=np.int32) for name in set(_TERRAIN_TYPES.values())}

        for obj in self.document.environment:
            category = _TERRAIN_TYPES.get(obj.type)
            if category is None:
                continue
            cell = self._to_grid(obj.position.x, obj.position.z)
            if cell is None:
                continue
            gx, gy = cell
            counts[category][gy, gx] += obj.tree_count or 1

        # Priority order: forest, mountains, water, lava, rocky
        rules = [
            (FOREST, counts["trees"] > 5, counts["trees"] / 20),
            (MOUNTAINS, counts["mountains"] > 0, counts["mountains"] / 3),
            (WATER, counts["water"] > 0, counts["water"] / 2),
            (LAVA, counts["lava"] > 0, counts["lava"] / 2),
            (ROCKY, counts["rocks"] > 3, counts["rocks"] / 10),
        ]
        assigned = np.zeros(shape, dtype=bool)
        for terrain, mask, density in rules:
            mask = mask & ~assigned
            self.terrain[mask] = terrain
            self.density[mask] = np.minimum(1.0, density[mask])
            assigned |= mask

        self.kinds[assigned & (self.kinds == EMPTY)] = TERRAIN

    def _process_structures(self) -> None:
        for index, structure in enumerate(self.document.structures):
            cell = self._to_grid(structure.position.x, structure.position.z)
            if cell is None:
                continue
            gx, gy = cell
            self.kinds[gy, gx] = STRUCTURE
            self.structure_ids[gy, gx] = index
            self.structures.append(
                {
                    "id": structure.id,
                    "type": structure.type,
                    "position": {"x": gx, "y": gy},
                    "worldPosition": structure.position.to_dict(),
                }
            )

    def _process_paths(self) -> None:
        for path in self.document.paths:
            points = []
            for point in path.points:
                cell = self._to_grid(point.x, point.z)
                if cell is None:
                    continue
                gx, gy = cell
                self.kinds[gy, gx] = PATH
                points.append({"x": gx, "y": gy})
            if len(points) >= 2:
                self.paths.append(
                    {"id": path.id, "type": path.type, "points": points, "width": path.width}
                )

    def to_dict(self) -> dict:
        """Minimap data in its JSON layout."""
        self.build()
        return {
            "gridSize": self.grid_size,
            "mapSize": self.map_size,
            "legend": {"cells": list(CELL_KINDS), "terrain": list(TERRAIN_NAMES)},
            "cells": self.kinds.tolist(),
            "zoneIndex": self.zone_ids.tolist(),
            "terrain": self.terrain.tolist(),
            "density": np.round(self.density, 3).tolist(),
            "zones": self.zones,
            "structures": self.structures,
            "paths": self.paths,
        }

    def _terrain_color(self, terrain: int) -> np.ndarray:
        theme = self.document.theme
        color = theme.color(*TERRAIN_PALETTE_ROLES[terrain]) or TERRAIN_COLORS[terrain]
        return _rgb(color)

    def render(self) -> np.ndarray:
        """RGB image of the grid, one pixel per cell."""
        self.build()
        image = np.tile(_rgb(BACKGROUND_COLOR), (self.grid_size, self.grid_size, 1))

        if self.zones:
            zone_colors = np.array([_rgb(zone["color"] or DEFAULT_ZONE_COLOR) for zone in self.zones])
            has_zone = self.kinds != EMPTY
            image[has_zone] = zone_colors[self.zone_ids[has_zone]]

        brightness = self.density * 0.7 + 0.3
        for terrain in TERRAIN_COLORS:
            mask = self.terrain == terrain
            if mask.any():
                image[mask] = np.clip(self._terrain_color(terrain) * brightness[mask][:, None], 0, 1)

        image[self.kinds == PATH] = _rgb(PATH_COLOR)

        structure_mask = self.kinds == STRUCTURE
        for gy, gx in zip(*np.nonzero(structure_mask)):
            structure = self.document.structures[self.structure_ids[gy, gx]]
            image[gy, gx] = _rgb(STRUCTURE_COLORS.get(structure.type, DEFAULT_STRUCTURE_COLOR))

        return image

    def save_image(self, file_path: FilePath, resolution: int) -> FilePath:
        """Render the grid to a square PNG of the given pixel size."""
        image = self.render()
        dpi = 100
        fig = plt.figure(figsize=(resolution / dpi, resolution / dpi), dpi=dpi)
        try:
            ax = fig.add_axes([0, 0, 1, 1])
            ax.imshow(image, origin="upper", interpolation="nearest")

            if self.structures:
                # Landmark markers, sized in points relative to the image
                scale = resolution / self.grid_size
                colors = [
                    STRUCTURE_COLORS.get(s["type"], DEFAULT_STRUCTURE_COLOR) for s in self.structures
                ]
                ax.scatter(
                    [s["position"]["x"] for s in self.structures],
                    [s["position"]["y"] for s in self.structures],
                    s=max(4.0, scale * 4),
                    c=colors,
                    edgecolors="white",
                    linewidths=0.5,
                )

            ax.set_xlim(-0.5, self.grid_size - 0.5)
            ax.set_ylim(self.grid_size - 0.5, -0.5)
            ax.axis("off")
            fig.savefig(file_path, dpi=dpi)
        finally:
            plt.close(fig)
        return file_path

    def generate(self, output_dir: FilePath, base_name: str) -> Dict[str, object]:
        """
        Write the minimap data file and images.

        Args:
            output_dir: Directory receiving the files, created when missing
            base_name: File name stem shared by every output

        Returns:
            Dict with the data file name and the image file names
        """
        output_dir = FilePath(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        images = []
        for resolution in self.options.image_resolutions:
            filename = f"{base_name}_{resolution}x{resolution}.png"
            self.save_image(output_dir / filename, resolution)
            images.append(filename)

        data = self.to_dict()
        data["images"] = images
        data_filename = f"{base_name}_minimap.json"

        (output_dir / data_filename).write_text(json.dumps(data, indent=2))

        logger.info(
            "Minimap generated",
            data=data_filename,
            images=len(images),
            grid_size=self.grid_size,
        )
        return {"data": data_filename, "images": images}
