"""
World document models.

Every record serializes with camelCase field names so generated documents
keep the layout the rendering layer reads. Models accept either the camelCase
alias or the snake_case field name on input.
"""

import math
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..config.themes import Theme

# Clearance footprint of a structure without a size field
DEFAULT_FOOTPRINT = 10.0


class WorldModel(BaseModel):
    """Base model with camelCase serialization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Vec3(WorldModel):
    """A point in world space, y is up."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_xz(self, other: "Vec3") -> float:
        return math.hypot(self.x - other.x, self.z - other.z)

    def offset(self, dx: float = 0.0, dz: float = 0.0, dy: float = 0.0) -> "Vec3":
        return Vec3(x=self.x + dx, y=self.y + dy, z=self.z + dz)


class ZoneRole(str, Enum):
    BOUNDARY = "boundary"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUB = "sub"


class PathPattern(str, Enum):
    STRAIGHT = "straight"
    CURVED = "curved"
    CIRCULAR = "circular"
    NATURAL = "natural"
    SPIRAL = "spiral"
    BRANCHING = "branching"


class VillageLayout(str, Enum):
    CIRCULAR = "circular"
    GRID = "grid"
    RIVERSIDE = "riverside"
    TERRACED = "terraced"


VILLAGE_LAYOUTS = (
    VillageLayout.CIRCULAR,
    VillageLayout.GRID,
    VillageLayout.RIVERSIDE,
    VillageLayout.TERRACED,
)


class Zone(WorldModel):
    """Advisory region used for colouring and biome lookup."""

    id: str
    name: str
    type: str
    role: ZoneRole
    center: Optional[Vec3] = None
    position: Optional[Vec3] = None
    radius: Optional[float] = Field(default=None, gt=0)
    points: Optional[List[Vec3]] = None
    color: str


class Path(WorldModel):
    """A width-bearing road polyline or closed loop."""

    id: str
    points: List[Vec3] = Field(min_length=2)
    width: float = Field(gt=0)
    pattern: PathPattern = PathPattern.STRAIGHT
    type: str = "road"
    center: Optional[Vec3] = None
    radius: Optional[float] = Field(default=None, gt=0)
    connects: Optional[Tuple[int, int]] = Field(
        default=None, description="Positional indices of the structures this path links"
    )

    @property
    def is_circular(self) -> bool:
        return (
            self.pattern == PathPattern.CIRCULAR
            and self.center is not None
            and self.radius is not None
        )


# Village sub-records


class Building(WorldModel):
    type: str
    position: Vec3
    rotation: float = 0.0
    width: float
    depth: float
    height: float
    style: int = 0
    ring: Optional[int] = None
    terrace: Optional[int] = None


class VillageDecoration(WorldModel):
    type: str
    position: Vec3
    rotation: Optional[float] = None
    size: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class VillagePath(WorldModel):
    type: Literal["circle", "line", "curve"]
    points: Optional[List[Vec3]] = None
    center: Optional[Vec3] = None
    radius: Optional[float] = None
    width: float = Field(gt=0)
    path_type: Optional[str] = None


class BuildingConnection(WorldModel):
    from_: int = Field(alias="from")
    to: int
    type: str = "path"


class CentralFeature(WorldModel):
    type: str
    position: Vec3
    radius: Optional[float] = None
    size: Optional[float] = None


# Structures


class StructureBase(WorldModel):
    id: str
    position: Vec3
    theme: str
    cluster: Optional[int] = None

    @property
    def footprint(self) -> float:
        """Clearance footprint: the size field when present, else the default."""
        size = getattr(self, "size", None)
        return size if size else DEFAULT_FOOTPRINT


class Village(StructureBase):
    type: Literal["village"] = "village"
    style: int = Field(ge=0, le=3)
    layout: VillageLayout
    building_count: int = 0
    buildings: List[Building] = Field(default_factory=list)
    decorations: List[VillageDecoration] = Field(default_factory=list)
    paths: List[VillagePath] = Field(default_factory=list)
    connections: List[BuildingConnection] = Field(default_factory=list)
    central_feature: Optional[CentralFeature] = None


class Tower(StructureBase):
    type: Literal["tower"] = "tower"
    height: float
    radius: float


class Ruins(StructureBase):
    type: Literal["ruins"] = "ruins"
    size: float


class DarkSanctum(StructureBase):
    type: Literal["darkSanctum"] = "darkSanctum"
    size: float


class Bridge(StructureBase):
    type: Literal["bridge"] = "bridge"
    length: float
    width: float
    rotation: float = 0.0


class Outpost(StructureBase):
    """Small structure raised on a mountain pass."""

    type: Literal["watchtower", "mountain_shrine"]
    size: float


Structure = Annotated[
    Union[Village, Tower, Ruins, DarkSanctum, Bridge, Outpost],
    Field(discriminator="type"),
]


# Environment


class ClusterMember(WorldModel):
    relative_position: Vec3
    size: float


class EnvironmentObject(WorldModel):
    """A decoration placed in the world: tree, rock, water, theme feature, ..."""

    type: str
    position: Vec3
    theme: str
    size: Optional[float] = None
    height: Optional[float] = None
    width: Optional[float] = None
    depth: Optional[float] = None
    rotation: Optional[float] = None
    cluster: Optional[str] = None
    background: Optional[bool] = None
    scattered: Optional[bool] = None
    flower_type: Optional[str] = None
    variant: Optional[int] = None
    color: Optional[str] = None
    glowing: Optional[bool] = None
    cross_theme: Optional[bool] = None
    # Tree cluster aggregates, written only by compaction
    tree_count: Optional[int] = None
    avg_size: Optional[float] = None
    radius: Optional[float] = None
    trees: Optional[List[ClusterMember]] = None


# Document


class CompactionStats(WorldModel):
    original_tree_count: int
    cluster_count: int
    singleton_count: int
    output_tree_records: int
    compression_ratio: float
    cell_size: float


class Metadata(WorldModel):
    seed: int
    size: float
    generated_at: str
    theme_key: str
    counts: Dict[str, int] = Field(default_factory=dict)
    compaction: Optional[CompactionStats] = None


class WorldDocument(WorldModel):
    """Root of a generated world."""

    theme: Theme
    zones: List[Zone] = Field(default_factory=list)
    structures: List[Structure] = Field(default_factory=list)
    paths: List[Path] = Field(default_factory=list)
    environment: List[EnvironmentObject] = Field(default_factory=list)
    metadata: Metadata

    @model_validator(mode="after")
    def _check_connections(self) -> "WorldDocument":
        count = len(self.structures)
        for path in self.paths:
            if path.connects is None:
                continue
            i, j = path.connects
            if not (0 <= i < count and 0 <= j < count):
                raise ValueError(
                    f"Path {path.id} connects structures {i},{j} but only {count} exist"
                )
        return self

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "WorldDocument":
        return cls.model_validate_json(text)

    def count_by_type(self, items: str) -> Dict[str, int]:
        """Histogram of record types for one of the document's lists."""
        counts: Dict[str, int] = {}
        for item in getattr(self, items):
            key = item.role.value if items == "zones" else item.type
            counts[key] = counts.get(key, 0) + 1
        return counts

    def stats(self) -> Dict[str, int]:
        return {
            "zones": len(self.zones),
            "structures": len(self.structures),
            "paths": len(self.paths),
            "environment": len(self.environment),
        }
