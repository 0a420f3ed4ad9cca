"""
Main road network generation.

Produces, in order: grid lines with per-point lateral noise, two diagonals,
concentric and random circular loops, random quadratic Bezier curves and one
jittered road from the centre to each corner of the boundary.
"""

import math
from typing import List, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .builder import WorldBuilder
from .geometry import circle_points, quadratic_bezier
from .models import Path, PathPattern, Vec3
from .seeded_prng import SeededRandom

logger = structlog.get_logger()

DEFAULT_PATH_WIDTH = 3.0


class PathOptions(BaseModel):
    """Road network options. Distances are given for a 1000-unit map."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    grid_size: int = Field(default=3, ge=1, description="Grid cells per side")
    grid_segments: int = Field(default=10, ge=1, description="Segments per grid line")
    grid_noise: float = Field(default=15.0, description="Max lateral noise per grid point")
    inner_circle_factor: float = Field(default=0.3, description="Inner loop radius factor")
    outer_circle_factor: float = Field(default=0.6, description="Outer loop radius factor")
    circle_segments: int = Field(default=16, ge=3, description="Segments per circular road")
    random_circles: int = Field(default=3, ge=0, description="Number of random loops")
    random_circle_min_radius: float = Field(default=50.0, description="Random loop min radius")
    random_circle_max_radius: float = Field(default=150.0, description="Random loop max radius")
    random_circle_spread: float = Field(
        default=0.7, description="Random loop centres as a share of the boundary"
    )
    curves: int = Field(default=5, ge=0, description="Number of Bezier curves")
    curve_steps: int = Field(default=10, ge=1, description="Steps per Bezier curve")
    curve_spread: float = Field(default=0.8, description="Curve endpoints share of the boundary")
    curve_control_offset: float = Field(default=100.0, description="Max control point offset")
    corner_steps: int = Field(default=8, ge=4, description="Steps per corner road")
    corner_jitter: float = Field(default=10.0, description="Per-point jitter on corner roads")
    corner_width_factor: float = Field(default=0.8, description="Corner road width factor")


class PathNetwork:
    """Generates the main road graph of a world."""

    def __init__(
        self,
        builder: WorldBuilder,
        rng: SeededRandom,
        options: Optional[PathOptions] = None,
    ):
        self.builder = builder
        self.rng = rng
        self.options = options or PathOptions()
        self.path_width = builder.theme.features.path_width or DEFAULT_PATH_WIDTH
        self.scale = builder.scale

    def _jitter(self, amount: float) -> float:
        """Uniform offset in [-amount, amount) scaled to the map."""
        return (self.rng.random() * 2 * amount - amount) * self.scale

    def generate(self) -> List[Path]:
        """Generate every road category and append them to the builder."""
        logger.info("Generating main paths", path_width=self.path_width)

        before = len(self.builder.paths)
        self._grid_lines()
        self._diagonals()
        self._circles()
        self._curves()
        self._corner_paths()

        added = self.builder.paths[before:]
        logger.info("Main paths generated", count=len(added))
        return added

    def _grid_lines(self) -> None:
        opts = self.options
        size = self.builder.boundary_size
        h = self.builder.boundary_half_size
        cell_size = size / opts.grid_size
        segment_length = size / opts.grid_segments

        for i in range(opts.grid_size + 1):
            z = -h + i * cell_size
            points = [
                Vec3(x=-h + j * segment_length, z=z + self._jitter(opts.grid_noise))
                for j in range(opts.grid_segments + 1)
            ]
            self.builder.add_path(f"horizontal_{i}", points, self.path_width, PathPattern.NATURAL)

        for i in range(opts.grid_size + 1):
            x = -h + i * cell_size
            points = [
                Vec3(x=x + self._jitter(opts.grid_noise), z=-h + j * segment_length)
                for j in range(opts.grid_segments + 1)
            ]
            self.builder.add_path(f"vertical_{i}", points, self.path_width, PathPattern.NATURAL)

    def _diagonals(self) -> None:
        h = self.builder.boundary_half_size
        for path_id, sign in (("diagonal_1", 1), ("diagonal_2", -1)):
            points = [
                Vec3(x=sign * -h, z=-h),
                Vec3(x=sign * -h / 2, z=-h / 2),
                Vec3(x=0, z=0),
                Vec3(x=sign * h / 2, z=h / 2),
                Vec3(x=sign * h, z=h),
            ]
            self.builder.add_path(path_id, points, self.path_width, PathPattern.NATURAL)

    def create_circular_path(self, path_id: str, center: Vec3, radius: float, width: float):
        """Closed loop with first point equal to last, recording centre and radius."""
        points = circle_points(center, radius, self.options.circle_segments)
        return self.builder.add_path(
            path_id,
            points,
            width,
            PathPattern.CIRCULAR,
            center=Vec3(x=center.x, z=center.z),
            radius=radius,
        )

    def _circles(self) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        size = self.builder.boundary_size
        origin = Vec3()

        self.create_circular_path("center_circle_1", origin, h * opts.inner_circle_factor, self.path_width)
        self.create_circular_path("center_circle_2", origin, h * opts.outer_circle_factor, self.path_width)

        for i in range(opts.random_circles):
            cx = (self.rng.random() * size - h) * opts.random_circle_spread
            cz = (self.rng.random() * size - h) * opts.random_circle_spread
            radius = (
                opts.random_circle_min_radius
                + self.rng.random() * (opts.random_circle_max_radius - opts.random_circle_min_radius)
            ) * self.scale
            self.create_circular_path(f"random_circle_{i}", Vec3(x=cx, z=cz), radius, self.path_width)

    def _curves(self) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        size = self.builder.boundary_size

        def spread() -> float:
            return (self.rng.random() * size - h) * opts.curve_spread

        for i in range(opts.curves):
            start = Vec3(x=spread(), z=spread())
            end = Vec3(x=spread(), z=spread())
            control = Vec3(
                x=(start.x + end.x) / 2 + self._jitter(opts.curve_control_offset),
                z=(start.z + end.z) / 2 + self._jitter(opts.curve_control_offset),
            )
            points = quadratic_bezier(start, control, end, opts.curve_steps)
            self.builder.add_path(f"curved_path_{i}", points, self.path_width, PathPattern.NATURAL)

    def _corner_paths(self) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        corners = [(-h, -h), (h, -h), (h, h), (-h, h)]

        for index, (end_x, end_z) in enumerate(corners):
            controls = [
                Vec3(x=end_x * 0.25 + self._jitter(25), z=end_z * 0.25 + self._jitter(25)),
                Vec3(x=end_x * 0.5 + self._jitter(40), z=end_z * 0.5 + self._jitter(40)),
                Vec3(x=end_x * 0.75 + self._jitter(25), z=end_z * 0.75 + self._jitter(25)),
            ]
            anchors = [Vec3(), *controls, Vec3(x=end_x, z=end_z)]

            points = [Vec3()]
            for i in range(1, opts.corner_steps):
                point = piecewise_point(anchors, i / opts.corner_steps)
                points.append(
                    Vec3(
                        x=point.x + self._jitter(opts.corner_jitter),
                        z=point.z + self._jitter(opts.corner_jitter),
                    )
                )
            points.append(Vec3(x=end_x, z=end_z))

            self.builder.add_path(
                f"corner_path_{index}",
                points,
                self.path_width * opts.corner_width_factor,
                PathPattern.NATURAL,
            )


def piecewise_point(anchors: Sequence[Vec3], progress: float) -> Vec3:
    """Linear interpolation along evenly weighted anchor segments."""
    segments = len(anchors) - 1
    segment = min(int(progress * segments), segments - 1)
    local = progress * segments - segment
    a, b = anchors[segment], anchors[segment + 1]
    return Vec3(x=a.x + (b.x - a.x) * local, z=a.z + (b.z - a.z) * local)


def midpoint_curve(rng: SeededRandom, start: Vec3, end: Vec3, offset: float) -> List[Vec3]:
    """Three-point curved road with its midpoint displaced by up to offset."""
    mid_x = (start.x + end.x) / 2 + (rng.random() - 0.5) * 2 * offset
    mid_z = (start.z + end.z) / 2 + (rng.random() - 0.5) * 2 * offset
    return [Vec3(x=start.x, z=start.z), Vec3(x=mid_x, z=mid_z), Vec3(x=end.x, z=end.z)]
