"""
Spatial validity checks for candidate placements.

A position is rejected when it lies within the clearance of any structure,
within the enlarged clearance of any village, or within the clearance of any
road. SpatialIndex buckets structures and path segments into a uniform grid so
each check only visits nearby items; is_valid_linear() is the plain scan over
every item and both always reach the same decision.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple

from .geometry import distance_to_segment
from .models import Path, Vec3

# Approximate footprint radius of a whole village
VILLAGE_CLEARANCE = 30.0

# Threshold multipliers for background filler
BACKGROUND_STRUCTURE_FACTOR = 1.5
BACKGROUND_PATH_FACTOR = 1.2

Segment = Tuple[int, float, float, float, float, float]


def clearance_thresholds(
    min_structures: float, min_paths: float, background: bool
) -> Tuple[float, float]:
    if background:
        return (
            min_structures * BACKGROUND_STRUCTURE_FACTOR,
            min_paths * BACKGROUND_PATH_FACTOR,
        )
    return min_structures, min_paths


def structure_blocks(structure, x: float, z: float, structure_distance: float) -> bool:
    """True when the structure's clearance covers the point."""
    distance = math.hypot(x - structure.position.x, z - structure.position.z)
    if distance < structure_distance + structure.footprint:
        return True
    return structure.type == "village" and distance < VILLAGE_CLEARANCE + structure_distance


def circle_blocks(path: Path, x: float, z: float, path_distance: float) -> bool:
    """Radial band test for closed circular roads."""
    distance = math.hypot(x - path.center.x, z - path.center.z)
    return abs(distance - path.radius) < path_distance + path.width


def path_blocks(path: Path, x: float, z: float, path_distance: float) -> bool:
    if path.is_circular:
        return circle_blocks(path, x, z, path_distance)
    points = path.points
    for p1, p2 in zip(points, points[1:]):
        if distance_to_segment(x, z, p1.x, p1.z, p2.x, p2.z) < path_distance + path.width:
            return True
    return False


class SpatialIndex:
    """Uniform grid over structures and linear road segments."""

    def __init__(self, cell_size: float = 32.0):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self.structures: List = []
        self.paths: List[Path] = []
        self.circles: List[Path] = []
        self.max_footprint = 0.0
        self.max_path_width = 0.0
        self._structure_cells: Dict[Tuple[int, int], List[int]] = defaultdict(list)
        self._segment_cells: Dict[Tuple[int, int], List[int]] = defaultdict(list)
        self._segments: List[Segment] = []

    def _cell(self, x: float, z: float) -> Tuple[int, int]:
        return math.floor(x / self.cell_size), math.floor(z / self.cell_size)

    def _cell_range(
        self, min_x: float, min_z: float, max_x: float, max_z: float
    ) -> Iterator[Tuple[int, int]]:
        cx0, cz0 = self._cell(min_x, min_z)
        cx1, cz1 = self._cell(max_x, max_z)
        for cx in range(cx0, cx1 + 1):
            for cz in range(cz0, cz1 + 1):
                yield cx, cz

    def add_structure(self, structure) -> None:
        reach = structure.footprint
        if structure.type == "village":
            reach = max(reach, VILLAGE_CLEARANCE)
        self.max_footprint = max(self.max_footprint, reach)
        self._structure_cells[self._cell(structure.position.x, structure.position.z)].append(
            len(self.structures)
        )
        self.structures.append(structure)

    def add_path(self, path: Path) -> None:
        self.paths.append(path)
        self.max_path_width = max(self.max_path_width, path.width)
        if path.is_circular:
            self.circles.append(path)
            return

        path_index = len(self.paths) - 1
        for p1, p2 in zip(path.points, path.points[1:]):
            segment_id = len(self._segments)
            self._segments.append((path_index, p1.x, p1.z, p2.x, p2.z, path.width))
            for cell in self._cell_range(
                min(p1.x, p2.x), min(p1.z, p2.z), max(p1.x, p2.x), max(p1.z, p2.z)
            ):
                self._segment_cells[cell].append(segment_id)

    def structures_near(self, x: float, z: float, reach: float) -> Iterator:
        for cell in self._cell_range(x - reach, z - reach, x + reach, z + reach):
            for index in self._structure_cells.get(cell, ()):
                yield self.structures[index]

    def segments_near(self, x: float, z: float, reach: float) -> Iterator[Segment]:
        seen: Set[int] = set()
        for cell in self._cell_range(x - reach, z - reach, x + reach, z + reach):
            for segment_id in self._segment_cells.get(cell, ()):
                if segment_id not in seen:
                    seen.add(segment_id)
                    yield self._segments[segment_id]


class SpatialValidator:
    """
    Answers whether a candidate position keeps clear of structures and roads.

    The validator reads the index live, so positions are checked against
    everything added so far in the run.
    """

    def __init__(self, index: SpatialIndex):
        self.index = index

    @classmethod
    def from_items(
        cls, structures: Iterable, paths: Iterable[Path], cell_size: float = 32.0
    ) -> "SpatialValidator":
        index = SpatialIndex(cell_size)
        for structure in structures:
            index.add_structure(structure)
        for path in paths:
            index.add_path(path)
        return cls(index)

    def is_valid(
        self,
        position: Vec3,
        min_structures: float = 10,
        min_paths: float = 5,
        background: bool = False,
    ) -> bool:
        """
        Check a candidate position against the clearance rules.

        Args:
            position: Candidate point, only x and z are used
            min_structures: Clearance added to each structure footprint
            min_paths: Clearance added to each road width
            background: Inflate both thresholds for background filler

        Returns:
            True when the position is clear
        """
        x, z = position.x, position.z
        structure_distance, path_distance = clearance_thresholds(
            min_structures, min_paths, background
        )
        index = self.index

        reach = structure_distance + index.max_footprint
        for structure in index.structures_near(x, z, reach):
            if structure_blocks(structure, x, z, structure_distance):
                return False

        for circle in index.circles:
            if circle_blocks(circle, x, z, path_distance):
                return False

        reach = path_distance + index.max_path_width
        for _, x1, z1, x2, z2, width in index.segments_near(x, z, reach):
            if distance_to_segment(x, z, x1, z1, x2, z2) < path_distance + width:
                return False

        return True

    def is_valid_linear(
        self,
        position: Vec3,
        min_structures: float = 10,
        min_paths: float = 5,
        background: bool = False,
    ) -> bool:
        """Reference check scanning every structure and path."""
        return is_position_clear(
            position,
            self.index.structures,
            self.index.paths,
            min_structures,
            min_paths,
            background,
        )


def is_position_clear(
    position: Vec3,
    structures: Sequence,
    paths: Sequence[Path],
    min_structures: float = 10,
    min_paths: float = 5,
    background: bool = False,
) -> bool:
    """Linear scan of the clearance rules over explicit structure and path lists."""
    x, z = position.x, position.z
    structure_distance, path_distance = clearance_thresholds(
        min_structures, min_paths, background
    )

    for structure in structures:
        if structure_blocks(structure, x, z, structure_distance):
            return False

    for path in paths:
        if len(path.points) < 2 and not path.is_circular:
            continue
        if path_blocks(path, x, z, path_distance):
            return False

    return True
