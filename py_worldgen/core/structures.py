"""
Structure placement: villages, towers, ruins, dark sanctums and bridges.

Structures are distributed around random cluster centres with per-category
placement policies (at a cluster centre, near a cluster, strategic fixed
points or uniformly random). Placement never fails and never retries, so
structures may overlap.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .builder import WorldBuilder
from .geometry import random_position
from .models import Bridge, DarkSanctum, Ruins, Tower, Vec3
from .seeded_prng import SeededRandom
from .villages import VillageBuilder, VillageOptions

logger = structlog.get_logger()


class StructureOptions(BaseModel):
    """Structure placement options. Distances are given for a 1000-unit map."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    min_clusters: int = Field(default=5, ge=1, description="Minimum number of clusters")
    cluster_spread: int = Field(default=5, ge=0, description="Random extra clusters (exclusive)")
    cluster_min_radius: float = Field(default=50.0, description="Cluster min radius")
    cluster_max_radius: float = Field(default=150.0, description="Cluster max radius")

    structure_multiplier: float = Field(
        default=2.0, description="Multiplier on theme village/tower/ruins/sanctum counts"
    )
    bridge_multiplier: float = Field(default=1.5, description="Multiplier on theme bridge count")
    default_villages: int = Field(default=10, description="Villages when the theme sets none")
    default_towers: int = Field(default=15, description="Towers when the theme sets none")
    default_ruins: int = Field(default=20, description="Ruins when the theme sets none")
    default_sanctums: int = Field(default=5, description="Sanctums when the theme sets none")
    default_bridges: int = Field(default=15, description="Bridges when the theme sets none")

    village_center_chance: float = Field(default=0.7, description="Village at a cluster centre")
    village_near_chance: float = Field(default=0.6, description="Village near a cluster")
    tower_near_chance: float = Field(default=0.4, description="Tower just outside a cluster")
    ruins_near_chance: float = Field(default=0.3, description="Ruins near a cluster")
    sanctum_corner_chance: float = Field(default=0.7, description="Sanctum in a corner")
    bridge_near_chance: float = Field(default=0.4, description="Bridge near a cluster edge")

    village: VillageOptions = Field(default_factory=VillageOptions)


@dataclass
class StructureCluster:
    """Anchor point around which related structures are grouped."""

    index: int
    position: Vec3
    radius: float


@dataclass
class StructureCounts:
    villages: int
    towers: int
    ruins: int
    sanctums: int
    bridges: int


class StructurePlacer:
    """Places every structure category around random clusters."""

    def __init__(
        self,
        builder: WorldBuilder,
        rng: SeededRandom,
        options: Optional[StructureOptions] = None,
    ):
        self.builder = builder
        self.rng = rng
        self.options = options or StructureOptions()
        self.scale = builder.scale
        self.theme_name = builder.theme_name
        self.villages = VillageBuilder(rng, self.theme_name, self.options.village)
        self.clusters: List[StructureCluster] = []

    def structure_counts(self) -> StructureCounts:
        """
        Resolve per-category counts from the theme features.

        An absent feature falls back to the category default; an explicit zero
        stays zero.
        """
        features = self.builder.theme.features
        opts = self.options
        mult = opts.structure_multiplier

        def resolve(value: Optional[int], default: int, multiplier: float) -> int:
            if value is None:
                return default
            return int(math.ceil(value * multiplier))

        return StructureCounts(
            villages=resolve(features.village_count, opts.default_villages, mult),
            towers=resolve(features.tower_count, opts.default_towers, mult),
            ruins=resolve(features.ruins_count, opts.default_ruins, mult),
            sanctums=resolve(features.dark_sanctum_count, opts.default_sanctums, mult),
            bridges=resolve(features.bridge_count, opts.default_bridges, opts.bridge_multiplier),
        )

    def generate(self) -> list:
        counts = self.structure_counts()
        logger.info(
            "Generating structures",
            villages=counts.villages,
            towers=counts.towers,
            ruins=counts.ruins,
            sanctums=counts.sanctums,
            bridges=counts.bridges,
        )

        before = len(self.builder.structures)
        self.clusters = self._generate_clusters()
        self._place_villages(counts.villages)
        self._place_towers(counts.towers)
        self._place_ruins(counts.ruins)
        self._place_sanctums(counts.sanctums)
        self._place_bridges(counts.bridges)

        added = self.builder.structures[before:]
        logger.info("Structures generated", count=len(added), clusters=len(self.clusters))
        return added

    def _generate_clusters(self) -> List[StructureCluster]:
        opts = self.options
        count = opts.min_clusters + int(self.rng.random() * opts.cluster_spread)
        limit = self.builder.boundary_half_size * 0.8

        clusters = []
        for i in range(count):
            angle = self.rng.random() * math.pi * 2
            distance = self.rng.random() * limit
            position = Vec3(x=math.cos(angle) * distance, z=math.sin(angle) * distance)
            radius = (
                opts.cluster_min_radius
                + self.rng.random() * (opts.cluster_max_radius - opts.cluster_min_radius)
            ) * self.scale
            clusters.append(StructureCluster(index=i, position=position, radius=radius))
        return clusters

    def _random_cluster(self) -> StructureCluster:
        return self.clusters[int(self.rng.random() * len(self.clusters))]

    def _around(self, cluster: StructureCluster, distance: float, angle: float) -> Vec3:
        return Vec3(
            x=cluster.position.x + math.cos(angle) * distance,
            z=cluster.position.z + math.sin(angle) * distance,
        )

    def _place_villages(self, count: int) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        cluster_count = len(self.clusters)

        for i in range(count):
            cluster_index = None
            if i < cluster_count and self.rng.random() < opts.village_center_chance:
                cluster = self.clusters[i % cluster_count]
                position = Vec3(x=cluster.position.x, z=cluster.position.z)
                cluster_index = cluster.index
            elif self.rng.random() < opts.village_near_chance:
                cluster = self._random_cluster()
                angle = self.rng.random() * math.pi * 2
                distance = self.rng.random() * cluster.radius
                position = self._around(cluster, distance, angle)
                cluster_index = cluster.index
            else:
                position = random_position(self.rng, 0, h * 0.9)

            village = self.villages.build(position, f"village_{i}", cluster_index)
            self.builder.add_structure(village)

    def _place_towers(self, count: int) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        edge = h * 0.8
        strategic = [
            (-edge, -edge),
            (edge, -edge),
            (edge, edge),
            (-edge, edge),
            (0.0, -edge),
            (edge, 0.0),
            (0.0, edge),
            (-edge, 0.0),
        ]

        for i in range(count):
            cluster_index = None
            if i < len(strategic):
                x, z = strategic[i]
                x += (self.rng.random() * 40 - 20) * self.scale
                z += (self.rng.random() * 40 - 20) * self.scale
                position = Vec3(x=x, z=z)
            elif self.rng.random() < opts.tower_near_chance:
                cluster = self._random_cluster()
                angle = self.rng.random() * math.pi * 2
                distance = cluster.radius + (20 + self.rng.random() * 30) * self.scale
                position = self._around(cluster, distance, angle)
                cluster_index = cluster.index
            else:
                position = random_position(self.rng, 0, h * 0.9)

            tower = Tower(
                id=f"tower_{i}",
                position=position,
                theme=self.theme_name,
                cluster=cluster_index,
                height=15 + self.rng.random() * 10,
                radius=3 + self.rng.random() * 2,
            )
            self.builder.add_structure(tower)

    def _place_ruins(self, count: int) -> None:
        opts = self.options
        h = self.builder.boundary_half_size

        for i in range(count):
            cluster_index = None
            if self.rng.random() < opts.ruins_near_chance:
                cluster = self._random_cluster()
                angle = self.rng.random() * math.pi * 2
                distance = self.rng.random() * (cluster.radius + 50 * self.scale)
                position = self._around(cluster, distance, angle)
                cluster_index = cluster.index
            else:
                position = random_position(self.rng, 0, h * 0.95)

            ruins = Ruins(
                id=f"ruins_{i}",
                position=position,
                theme=self.theme_name,
                cluster=cluster_index,
                size=5 + self.rng.random() * 10,
            )
            self.builder.add_structure(ruins)

    def _place_sanctums(self, count: int) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        corner = h * 0.7
        corners = [(-corner, -corner), (corner, -corner), (corner, corner), (-corner, corner)]

        for i in range(count):
            if i < len(corners) and self.rng.random() < opts.sanctum_corner_chance:
                x, z = corners[i]
                x += (self.rng.random() * 60 - 30) * self.scale
                z += (self.rng.random() * 60 - 30) * self.scale
                position = Vec3(x=x, z=z)
            else:
                angle = self.rng.random() * math.pi * 2
                distance = h * (0.6 + self.rng.random() * 0.3)
                position = Vec3(x=math.cos(angle) * distance, z=math.sin(angle) * distance)

            sanctum = DarkSanctum(
                id=f"sanctum_{i}",
                position=position,
                theme=self.theme_name,
                size=8 + self.rng.random() * 6,
            )
            self.builder.add_structure(sanctum)

    def _place_bridges(self, count: int) -> None:
        opts = self.options
        h = self.builder.boundary_half_size
        grid_size = 3
        cell_size = self.builder.boundary_size / grid_size
        intersections = [
            (-h + gx * cell_size, -h + gz * cell_size)
            for gx in range(1, grid_size)
            for gz in range(1, grid_size)
        ]

        for i in range(count):
            cluster_index = None
            if i < 8:
                x, z = intersections[i % len(intersections)]
                x += (self.rng.random() * 50 - 25) * self.scale
                z += (self.rng.random() * 50 - 25) * self.scale
                position = Vec3(x=x, z=z)
            elif self.rng.random() < opts.bridge_near_chance:
                cluster = self._random_cluster()
                angle = self.rng.random() * math.pi * 2
                distance = cluster.radius * (0.8 + self.rng.random() * 0.4)
                position = self._around(cluster, distance, angle)
                cluster_index = cluster.index
            else:
                position = random_position(self.rng, 0, h * 0.9)

            rotation = self.rng.random() * math.pi
            bridge = Bridge(
                id=f"bridge_{i}",
                position=position,
                theme=self.theme_name,
                cluster=cluster_index,
                length=10 + self.rng.random() * 15,
                width=3 + self.rng.random() * 2,
                rotation=rotation,
            )
            self.builder.add_structure(bridge)
