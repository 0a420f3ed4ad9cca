"""
Append-only world builder handed to each generation stage in turn.
"""

from typing import Iterable, List, Optional, Sequence

import structlog

from ..config.themes import Theme
from .models import (
    EnvironmentObject,
    Metadata,
    Path,
    PathPattern,
    Vec3,
    WorldDocument,
    Zone,
)
from .spatial import SpatialIndex, SpatialValidator

logger = structlog.get_logger()

# Reference map size for every absolute distance in the generators
REFERENCE_MAP_SIZE = 1000.0

# Share of the map inside the boundary square
BOUNDARY_FRACTION = 0.95


class WorldBuilder:
    """
    Accumulates the records of one generation run.

    The builder is owned by a single run. Stages only ever append; the spatial
    index is kept current on every road and structure added so validity checks
    always see the world built so far.
    """

    def __init__(self, theme: Theme, map_size: float = REFERENCE_MAP_SIZE, cell_size: float = 32.0):
        if map_size <= 0:
            raise ValueError(f"map_size must be positive, got {map_size}")
        self.theme = theme
        self.map_size = float(map_size)
        self.boundary_size = self.map_size * BOUNDARY_FRACTION
        self.boundary_half_size = self.boundary_size / 2
        self.scale = self.map_size / REFERENCE_MAP_SIZE

        self.zones: List[Zone] = []
        self.structures: List = []
        self.paths: List[Path] = []
        self.environment: List[EnvironmentObject] = []

        self.index = SpatialIndex(cell_size)
        self.validator = SpatialValidator(self.index)
        self._extra_ids = {}

    @property
    def theme_name(self) -> str:
        return self.theme.name

    def is_valid(
        self,
        position: Vec3,
        min_structures: float = 10,
        min_paths: float = 5,
        background: bool = False,
    ) -> bool:
        return self.validator.is_valid(position, min_structures, min_paths, background)

    def next_id(self, prefix: str) -> str:
        """Sequential id for records created outside the main placement loops."""
        count = self._extra_ids.get(prefix, 0)
        self._extra_ids[prefix] = count + 1
        return f"{prefix}_{count}"

    def add_zone(self, zone: Zone) -> Zone:
        self.zones.append(zone)
        return zone

    def add_path(
        self,
        path_id: str,
        points: Sequence[Vec3],
        width: float,
        pattern: PathPattern = PathPattern.NATURAL,
        **fields,
    ) -> Optional[Path]:
        """
        Add a road, flattening its points onto the ground plane.

        Degenerate roads (fewer than two points or no width) are logged and
        skipped.

        Returns:
            The added Path, or None when it was skipped
        """
        if len(points) < 2 or width <= 0:
            logger.warning(
                "Skipping degenerate path", path_id=path_id, points=len(points), width=width
            )
            return None

        path = Path(
            id=path_id,
            points=[Vec3(x=p.x, y=0.0, z=p.z) for p in points],
            width=width,
            pattern=pattern,
            **fields,
        )
        self.paths.append(path)
        self.index.add_path(path)
        return path

    def add_structure(self, structure):
        self.structures.append(structure)
        self.index.add_structure(structure)
        return structure

    def add_object(self, type: str, position: Vec3, **fields) -> EnvironmentObject:
        """Add an environment object tagged with the run's theme."""
        obj = EnvironmentObject(type=type, position=position, theme=self.theme.name, **fields)
        self.environment.append(obj)
        return obj

    def extend_environment(self, objects: Iterable[EnvironmentObject]) -> None:
        self.environment.extend(objects)

    def build(self, metadata: Metadata) -> WorldDocument:
        """Freeze the accumulated records into a WorldDocument."""
        return WorldDocument(
            theme=self.theme,
            zones=self.zones,
            structures=self.structures,
            paths=self.paths,
            environment=self.environment,
            metadata=metadata,
        )
