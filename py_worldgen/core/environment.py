"""
Environment scatter: decoration placed around roads and structures.

Sub-generators run in a fixed order, each appending to the builder:

1. Background coverage grid
2. Trees lining every road
3. Forest, rock and bush clusters
4. Boundary mountain ring with internal ranges, boundary water features
5. Themed special features with occasional cross-theme landmarks
6. Flower patches and primary-zone extras (mountains, water, lava)
7. Final scattered fill weighted by the theme's object table

Every candidate position goes through the spatial validity check before it
is placed. Rejected candidates are skipped, never retried.
"""

import math
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..config.objects import (
    CROSS_THEME_FEATURES,
    FLOWER_TYPES,
    ObjectSpec,
    scatter_table,
    special_features,
)
from .builder import WorldBuilder
from .geometry import nearby_position, random_position
from .models import EnvironmentObject, Outpost, Vec3
from .seeded_prng import SeededRandom

logger = structlog.get_logger()


class EnvironmentOptions(BaseModel):
    """Environment scatter options. Distances are given for a 1000-unit map."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Background coverage
    background_cell_size: float = Field(default=12.0, gt=0, description="Background grid cell")
    background_min_structures: float = Field(default=8.0, description="Background structure clearance")
    background_min_paths: float = Field(default=5.0, description="Background path clearance")

    # Minimum clearance for every foreground placement, cluster members included
    member_min_structures: float = Field(default=2.0, ge=0, description="Member structure clearance")
    member_min_paths: float = Field(default=1.0, ge=0, description="Member path clearance")

    # Vegetation
    path_tree_factor: float = Field(default=3.0, description="Road tree density per tree density")
    forest_cluster_factor: float = Field(default=4.0, description="Forest clusters per tree density")
    rock_count: int = Field(default=150, ge=0, description="Rock budget")
    bush_count: int = Field(default=120, ge=0, description="Bush budget")
    flower_count: int = Field(default=80, ge=0, description="Flower budget")

    # Mountains and water
    boundary_mountains: int = Field(default=24, ge=0, description="Mountains on the boundary ring")
    default_mountain_count: int = Field(default=16, ge=0, description="Internal mountain budget")
    mountain_zone_mountain_count: int = Field(
        default=32, ge=0, description="Internal mountain budget for mountain themes"
    )
    default_water_count: int = Field(default=20, ge=0, description="Boundary water features")
    swamp_water_count: int = Field(default=30, ge=0, description="Boundary water features in swamps")

    # Special features
    default_special_count: int = Field(default=15, ge=0, description="Special feature budget")
    cross_theme_chance: float = Field(default=0.15, description="Chance of a cross-theme landmark")

    # Primary zone extras
    extra_mountains: int = Field(default=30, ge=0, description="Extra mountains for mountain themes")
    extra_water: int = Field(default=25, ge=0, description="Extra water for swamp themes")
    extra_lava: int = Field(default=20, ge=0, description="Extra lava for desert themes")

    # Scattered fill
    scatter_factor: float = Field(default=1.5, description="Scatter attempts per map unit")
    scatter_min_structures: float = Field(default=5.0, description="Scatter structure clearance")
    scatter_min_paths: float = Field(default=3.0, description="Scatter path clearance")
    scatter_cluster_chance: float = Field(default=0.3, description="Chance to cluster a scatter object")
    glow_chance: float = Field(default=0.2, description="Chance a glow-capable object glows")


class EnvironmentScatter:
    """Populates the world's environment list."""

    def __init__(
        self,
        builder: WorldBuilder,
        rng: SeededRandom,
        options: Optional[EnvironmentOptions] = None,
    ):
        self.builder = builder
        self.rng = rng
        self.options = options or EnvironmentOptions()
        self.theme = builder.theme
        self.features = builder.theme.features
        self.primary_zone = builder.theme.primary_zone
        self.scale = builder.scale

    def generate(self) -> List[EnvironmentObject]:
        """Run every sub-generator in order."""
        logger.info("Generating environment", primary_zone=self.primary_zone)
        before = len(self.builder.environment)

        tree_density = self.features.tree_density or 0.0

        self.generate_background_coverage()
        if tree_density > 0:
            self.generate_trees_along_paths(tree_density * self.options.path_tree_factor)
            self.generate_forest_clusters(tree_density * self.options.forest_cluster_factor)
        self.generate_rock_clusters(self.options.rock_count)
        self.generate_bush_clusters(self.options.bush_count)
        self.generate_mountain_ranges_for_boundary()
        self.generate_water_features_for_boundary()
        self.generate_special_features()
        self.generate_flower_patches(self.options.flower_count)

        if self.primary_zone == "Mountains":
            self.generate_mountain_ranges_by_count(self.options.extra_mountains)
        elif self.primary_zone == "Swamp":
            self.generate_water_features_by_count(self.options.extra_water)
        elif self.primary_zone == "Desert":
            self.generate_lava_features(self.options.extra_lava)

        self.generate_scattered_objects()

        added = self.builder.environment[before:]
        logger.info("Environment generated", count=len(added))
        return added

    # Placement helpers

    def _d(self, distance: float) -> float:
        """Scale an absolute distance to the map."""
        return distance * self.scale

    def _random_position(self, min_radius: float, max_radius: float) -> Vec3:
        return random_position(self.rng, self._d(min_radius), self._d(max_radius))

    def _place(
        self,
        obj_type: str,
        position: Vec3,
        min_structures: Optional[float] = None,
        min_paths: Optional[float] = None,
        background: bool = False,
        **fields,
    ) -> Optional[EnvironmentObject]:
        """Add an object when its position passes the validity check."""
        opts = self.options
        min_structures = max(
            opts.member_min_structures if min_structures is None else min_structures,
            opts.member_min_structures,
        )
        min_paths = max(
            opts.member_min_paths if min_paths is None else min_paths, opts.member_min_paths
        )
        if not self.builder.is_valid(position, min_structures, min_paths, background):
            return None
        return self.builder.add_object(obj_type, position, **fields)

    def _place_background(
        self, obj_type: str, position: Vec3, min_structures: float, min_paths: float, **fields
    ) -> Optional[EnvironmentObject]:
        if not self.builder.is_valid(position, min_structures, min_paths, True):
            return None
        return self.builder.add_object(obj_type, position, **fields)

    # Background coverage

    def generate_background_coverage(self) -> int:
        """Fill a uniform grid with trees, rocks, bushes, flowers or tall grass."""
        opts = self.options
        map_radius = self.builder.map_size / 2
        cell = opts.background_cell_size
        grid_count = math.ceil(self.builder.map_size / cell)
        placed = 0

        for gx in range(grid_count):
            cell_x = (gx - grid_count / 2) * cell
            for gz in range(grid_count):
                cell_z = (gz - grid_count / 2) * cell

                dist = math.hypot(cell_x, cell_z)
                if dist > map_radius:
                    continue

                position = Vec3(
                    x=cell_x + (self.rng.random() - 0.5) * cell * 0.8,
                    z=cell_z + (self.rng.random() - 0.5) * cell * 0.8,
                )
                if not self.builder.is_valid(
                    position, opts.background_min_structures, opts.background_min_paths, True
                ):
                    continue

                object_type = self.background_object_type(dist, map_radius)
                placed += 1

                if object_type == "tree":
                    edge_factor = 1 - (dist / map_radius) * 0.3
                    self.builder.add_object(
                        "tree",
                        position,
                        size=(0.6 + self.rng.random() * 0.6) * edge_factor,
                        background=True,
                    )
                    if self.rng.random() < 0.4:
                        undergrowth = nearby_position(self.rng, position, 0.5, 2)
                        if self.rng.random() < 0.6:
                            kind = "bush"
                        elif self.rng.random() < 0.5:
                            kind = "flower"
                        else:
                            kind = "small_plant"
                        self._place_background(
                            kind,
                            undergrowth,
                            opts.background_min_structures,
                            opts.background_min_paths,
                            size=0.3 + self.rng.random() * 0.3,
                            background=True,
                        )
                elif object_type == "rock":
                    self.builder.add_object(
                        "rock", position, size=0.5 + self.rng.random() * 0.8, background=True
                    )
                elif object_type == "bush":
                    self.builder.add_object(
                        "bush", position, size=0.4 + self.rng.random() * 0.5, background=True
                    )
                elif object_type == "flower":
                    self.builder.add_object(
                        "flower", position, size=0.3 + self.rng.random() * 0.3, background=True
                    )
                else:
                    self.builder.add_object(
                        "tall_grass", position, size=0.4 + self.rng.random() * 0.4, background=True
                    )

        logger.debug("Background coverage generated", cells=placed)
        return placed

    def background_object_type(self, distance: float, map_radius: float) -> str:
        """Pick a background object kind from distance and theme weighted odds."""
        tree = (self.features.tree_density or 0.0) * 0.7
        rock = 0.1
        bush = 0.15
        flower = 0.1

        normalized = distance / map_radius
        if normalized < 0.3:
            tree *= 1.3
            rock *= 0.7
        elif normalized > 0.7:
            tree *= 0.8
            rock *= 1.5
            bush *= 1.2

        if self.primary_zone == "Forest":
            tree *= 1.5
            bush *= 1.2
        elif self.primary_zone == "Mountains":
            rock *= 2
            tree *= 0.7
        elif self.primary_zone == "Swamp":
            bush *= 1.5
            tree *= 0.8
        elif self.primary_zone == "Desert":
            rock *= 1.5
            tree *= 0.5
            bush *= 0.7

        roll = self.rng.random()
        if roll < tree:
            return "tree"
        if roll < tree + rock:
            return "rock"
        if roll < tree + rock + bush:
            return "bush"
        if roll < tree + rock + bush + flower:
            return "flower"
        return "tall_grass"

    # Vegetation

    def generate_trees_along_paths(self, density: float) -> int:
        """Line both sides of every road segment with rows of trees."""
        placed = 0
        for path in list(self.builder.paths):
            for start, end in zip(path.points, path.points[1:]):
                length = math.hypot(end.x - start.x, end.z - start.z)
                tree_count = math.floor(length * density / 3)

                for i in range(tree_count):
                    t = i / tree_count
                    x = start.x + (end.x - start.x) * t
                    z = start.z + (end.z - start.z) * t

                    for side in (-1, 1):
                        offset = path.width + 2 + self.rng.random() * 8
                        size = 0.7 + self.rng.random() * 0.6
                        if self._place("tree", Vec3(x=x + side * offset, z=z + side * offset), size=size):
                            placed += 1

                        for row in range(1, 4):
                            if self.rng.random() < 0.85 - row * 0.15:
                                row_offset = offset + row * 3 + self.rng.random() * 4
                                shift = self.rng.random() * 4 - 2
                                position = Vec3(
                                    x=x + side * row_offset + shift,
                                    z=z + side * row_offset + shift,
                                )
                                if self._place("tree", position, size=0.6 + self.rng.random() * 0.8):
                                    placed += 1

                        if self.rng.random() < 0.4:
                            bush_offset = offset + (self.rng.random() - 0.5) * 3
                            self._place(
                                "bush",
                                Vec3(x=x + side * bush_offset, z=z + side * bush_offset),
                                size=0.4 + self.rng.random() * 0.3,
                            )

                        if self.rng.random() < 0.2:
                            rock_offset = offset + (self.rng.random() - 0.5) * 3
                            self._place(
                                "rock",
                                Vec3(x=x + side * rock_offset, z=z + side * rock_offset),
                                size=0.5 + self.rng.random() * 0.5,
                            )

        logger.debug("Road trees generated", trees=placed)
        return placed

    def generate_forest_clusters(self, density: float) -> int:
        """Dense forests with undergrowth and occasional clearings."""
        cluster_count = math.floor((self.builder.map_size / 100) * density)
        created = 0

        for i in range(cluster_count):
            center = self._random_position(100, 400)
            if not self.builder.is_valid(center, 30, 20):
                continue
            created += 1
            cluster = f"forest_{i}"

            tree_total = 20 + int(self.rng.random() * 30)
            radius = 15 + self.rng.random() * 25

            for _ in range(tree_total):
                # Squared draw biases trees toward the centre
                distance = self.rng.random() * self.rng.random() * radius
                angle = self.rng.random() * math.pi * 2
                position = Vec3(
                    x=center.x + math.cos(angle) * distance,
                    z=center.z + math.sin(angle) * distance,
                )
                size = 0.6 + self.rng.random() * self.rng.random() * 0.8
                self._place("tree", position, size=size, cluster=cluster)

                if self.rng.random() < 0.4:
                    if self.rng.random() < 0.6:
                        kind = "bush"
                    elif self.rng.random() < 0.5:
                        kind = "flower"
                    else:
                        kind = "fallen_log"
                    undergrowth = nearby_position(self.rng, position, 1, 3)
                    self._place(
                        kind, undergrowth, size=0.3 + self.rng.random() * 0.3, cluster=cluster
                    )

            if self.rng.random() < 0.4 and radius > 25:
                for _ in range(1 + int(self.rng.random() * 2)):
                    clearing = nearby_position(self.rng, center, 5, radius * 0.7)
                    clearing_radius = 3 + self.rng.random() * 5

                    if self.rng.random() < 0.7:
                        if self.rng.random() < 0.5:
                            kind = "rock_formation"
                        elif self.rng.random() < 0.5:
                            kind = "shrine"
                        else:
                            kind = "stump"
                        self._place(
                            kind, clearing, size=1 + self.rng.random() * 0.5, cluster=cluster
                        )

                    for _ in range(3 + int(self.rng.random() * 5)):
                        spot = nearby_position(self.rng, clearing, 0.5, clearing_radius)
                        kind = "flower" if self.rng.random() < 0.6 else "mushroom"
                        self._place(kind, spot, size=0.2 + self.rng.random() * 0.3, cluster=cluster)

        logger.debug("Forest clusters generated", attempted=cluster_count, created=created)
        return created

    def generate_rock_clusters(self, count: int) -> int:
        """Rock formations with boulders and moss, then loose rocks."""
        cluster_count = count // 5
        created = 0

        for i in range(cluster_count):
            center = self._random_position(50, 400)
            if not self.builder.is_valid(center, 20, 10):
                continue
            created += 1
            cluster = f"rock_formation_{i}"

            rocks = 3 + int(self.rng.random() * 7)
            radius = 5 + self.rng.random() * 10

            for j in range(rocks):
                distance = self.rng.random() * radius
                angle = self.rng.random() * math.pi * 2
                position = Vec3(
                    x=center.x + math.cos(angle) * distance,
                    z=center.z + math.sin(angle) * distance,
                )
                boulder = j == 0 or self.rng.random() < 0.2
                size = 2 + self.rng.random() * 3 if boulder else 0.5 + self.rng.random() * 1.5
                self._place("rock", position, size=size, cluster=cluster)

                if self.rng.random() < 0.3:
                    plant = nearby_position(self.rng, position, 0.5, 1.5)
                    kind = "moss" if self.rng.random() < 0.7 else "small_plant"
                    self._place(kind, plant, size=0.3 + self.rng.random() * 0.2, cluster=cluster)

        for _ in range(count - cluster_count * 5):
            position = self._random_position(50, 400)
            if self.builder.is_valid(position, 10, 5):
                self.builder.add_object("rock", position, size=0.8 + self.rng.random() * 1.5)

        logger.debug("Rock clusters generated", created=created)
        return created

    def generate_bush_clusters(self, count: int) -> int:
        """Bush thickets with flowers, then loose bushes."""
        cluster_count = count // 4
        created = 0

        for i in range(cluster_count):
            center = self._random_position(30, 350)
            if not self.builder.is_valid(center, 15, 8):
                continue
            created += 1
            cluster = f"bush_thicket_{i}"

            bushes = 4 + int(self.rng.random() * 8)
            radius = 4 + self.rng.random() * 8

            for _ in range(bushes):
                distance = self.rng.random() * self.rng.random() * radius
                angle = self.rng.random() * math.pi * 2
                position = Vec3(
                    x=center.x + math.cos(angle) * distance,
                    z=center.z + math.sin(angle) * distance,
                )
                self._place("bush", position, size=0.5 + self.rng.random() * 0.7, cluster=cluster)

                if self.rng.random() < 0.4:
                    flower = nearby_position(self.rng, position, 0.5, 1.5)
                    kind = "flower" if self.rng.random() < 0.6 else "small_plant"
                    self._place(kind, flower, size=0.3 + self.rng.random() * 0.2, cluster=cluster)

        for _ in range(count - cluster_count * 6):
            position = self._random_position(30, 350)
            if self.builder.is_valid(position, 8, 4):
                self.builder.add_object("bush", position, size=0.6 + self.rng.random() * 0.5)

        logger.debug("Bush clusters generated", created=created)
        return created

    def generate_flower_patches(self, count: int) -> int:
        """Meadows dominated by one flower type, then loose flowers."""
        patch_count = count // 8
        created = 0

        for i in range(patch_count):
            center = self._random_position(20, 300)
            if not self.builder.is_valid(center, 10, 5):
                continue
            created += 1
            cluster = f"flower_patch_{i}"

            flowers = 8 + int(self.rng.random() * 12)
            radius = 3 + self.rng.random() * 7
            dominant = self.rng.choice(FLOWER_TYPES)

            for _ in range(flowers):
                distance = self.rng.random() * self.rng.random() * radius
                angle = self.rng.random() * math.pi * 2
                position = Vec3(
                    x=center.x + math.cos(angle) * distance,
                    z=center.z + math.sin(angle) * distance,
                )
                flower_type = dominant if self.rng.random() < 0.8 else self.rng.choice(FLOWER_TYPES)
                self._place(
                    "flower",
                    position,
                    size=0.3 + self.rng.random() * 0.4,
                    cluster=cluster,
                    flower_type=flower_type,
                )

                if self.rng.random() < 0.3:
                    grass = nearby_position(self.rng, position, 0.3, 1.0)
                    self._place(
                        "tall_grass", grass, size=0.4 + self.rng.random() * 0.3, cluster=cluster
                    )

        for _ in range(count - patch_count * 10):
            position = self._random_position(20, 300)
            if self.builder.is_valid(position, 5, 3):
                self.builder.add_object("flower", position, size=0.3 + self.rng.random() * 0.3)

        logger.debug("Flower patches generated", created=created)
        return created

    # Mountains, water and lava

    def generate_mountain_ranges_by_count(self, count: int) -> int:
        """
        Internal mountain ranges from a mountain budget.

        Every four mountains of budget make one range attempt; the budget left
        over after five mountains per range becomes single peaks. Ranges may
        open a pass guarded by a watchtower or shrine.
        """
        range_count = count // 4
        created = 0

        for i in range(range_count):
            center = self._random_position(150, 400)
            if not self.builder.is_valid(center, 40, 30):
                continue
            created += 1
            cluster = f"mountain_range_{i}"

            mountains = 4 + int(self.rng.random() * 6)
            length = self._d(40 + self.rng.random() * 60)
            width = self._d(15 + self.rng.random() * 25)
            angle = self.rng.random() * math.pi * 2
            dir_x, dir_z = math.cos(angle), math.sin(angle)

            for j in range(mountains):
                t = j / (mountains - 1)
                along = -length / 2 + length * t
                perp = (self.rng.random() - 0.5) * width
                position = Vec3(
                    x=center.x + dir_x * along - dir_z * perp,
                    z=center.z + dir_z * along + dir_x * perp,
                )
                # Taller in the middle of the range
                height_factor = 1 - abs(t - 0.5) * 2
                height = (20 + self.rng.random() * 20) * (0.7 + height_factor * 0.6)
                self._place("mountain", position, height=height, cluster=cluster)

                for _ in range(1 + int(self.rng.random() * 3)):
                    spot = nearby_position(self.rng, position, self._d(5), self._d(15))
                    if self.rng.random() < 0.6:
                        kind = "rock"
                    elif self.rng.random() < 0.5:
                        kind = "snow_patch"
                    else:
                        kind = "small_peak"
                    self._place(kind, spot, size=1 + self.rng.random() * 2, cluster=cluster)

            if self.rng.random() < 0.7:
                pass_position = Vec3(
                    x=center.x + (self.rng.random() - 0.5) * length * 0.6,
                    z=center.z + (self.rng.random() - 0.5) * length * 0.6,
                )
                self._place(
                    "mountain_pass", pass_position, width=5 + self.rng.random() * 10, cluster=cluster
                )

                if self.rng.random() < 0.5:
                    outpost_position = nearby_position(
                        self.rng, pass_position, self._d(5), self._d(15)
                    )
                    kind = "watchtower" if self.rng.random() < 0.7 else "mountain_shrine"
                    self.builder.add_structure(
                        Outpost(
                            id=self.builder.next_id(kind),
                            type=kind,
                            position=outpost_position,
                            theme=self.theme.name,
                            size=1 + self.rng.random() * 0.5,
                        )
                    )

        for _ in range(count - range_count * 5):
            position = self._random_position(100, 400)
            if self.builder.is_valid(position, 30, 20):
                self.builder.add_object("mountain", position, height=15 + self.rng.random() * 25)

        logger.debug("Mountain ranges generated", budget=count, ranges=created)
        return created

    def generate_mountain_ranges_for_boundary(self) -> int:
        """Ring of tall mountains inside the boundary, then internal ranges."""
        opts = self.options
        if self.features.mountain_range_count is not None:
            count = self.features.mountain_range_count
        elif self.primary_zone == "Mountains":
            count = opts.mountain_zone_mountain_count
        else:
            count = opts.default_mountain_count

        ring_radius = self.builder.boundary_half_size * 0.9
        ring = opts.boundary_mountains
        for i in range(ring):
            angle = (i / ring) * math.pi * 2
            position = Vec3(
                x=math.cos(angle) * ring_radius + self._d((self.rng.random() - 0.5) * 30),
                z=math.sin(angle) * ring_radius + self._d((self.rng.random() - 0.5) * 30),
            )
            self._place("mountain", position, height=40 + self.rng.random() * 80)

        return self.generate_mountain_ranges_by_count(count)

    def generate_water_features_by_count(self, count: int) -> int:
        placed = 0
        for _ in range(count):
            position = self._random_position(80, 350)
            if self._place("water", position, size=5 + self.rng.random() * 10):
                placed += 1
        logger.debug("Water features generated", budget=count, placed=placed)
        return placed

    def generate_water_features_for_boundary(self) -> int:
        """Lakes and ponds spread up to 80% of the boundary half size."""
        opts = self.options
        if self.features.water_feature_count is not None:
            count = self.features.water_feature_count
        elif self.primary_zone == "Swamp":
            count = opts.swamp_water_count
        else:
            count = opts.default_water_count

        max_radius = self.builder.boundary_half_size * 0.8
        placed = 0
        for _ in range(count):
            position = random_position(self.rng, self._d(80), max_radius)
            if self._place("water", position, size=5 + self.rng.random() * 10):
                placed += 1
        logger.debug("Boundary water generated", budget=count, placed=placed)
        return placed

    def generate_lava_features(self, count: int) -> int:
        placed = 0
        for _ in range(count):
            position = self._random_position(100, 350)
            if self._place("lava", position, size=3 + self.rng.random() * 8, glowing=True):
                placed += 1
        logger.debug("Lava features generated", budget=count, placed=placed)
        return placed

    # Special features

    def generate_special_features(self) -> int:
        """Landmarks from the primary zone's table, sometimes from another zone's."""
        opts = self.options
        count = self.features.special_feature_count
        if count is None:
            count = opts.default_special_count

        table = special_features(self.primary_zone)
        weights = [spec.weight for spec in table]
        other_zones = [zone for zone in CROSS_THEME_FEATURES if zone != self.primary_zone]
        placed = 0

        for _ in range(count):
            if other_zones and self.rng.random() < opts.cross_theme_chance:
                zone = self.rng.choice(other_zones)
                kind = self.rng.choice(CROSS_THEME_FEATURES[zone])
                position = self._random_position(80, 350)
                obj = self._place(
                    kind, position, size=3 + self.rng.random() * 5, cross_theme=True
                )
            else:
                spec = self.rng.weighted_choice(table, weights)
                position = self._random_position(spec.min_distance, spec.max_distance)
                size = spec.min_size + self.rng.random() * (spec.max_size - spec.min_size)
                obj = self._place(spec.type, position, size=size, glowing=spec.glowing or None)
            if obj is not None:
                placed += 1

        logger.debug("Special features generated", budget=count, placed=placed)
        return placed

    # Scattered fill

    def generate_scattered_objects(self) -> int:
        """Last pass closing visible gaps with themed objects."""
        opts = self.options
        attempts = math.floor(self.builder.map_size * opts.scatter_factor)
        table = scatter_table(self.primary_zone)
        weights = [spec.weight for spec in table]
        placed = 0

        for _ in range(attempts):
            position = random_position(self.rng, self._d(20), self.builder.map_size / 2)
            if not self.builder.is_valid(
                position, opts.scatter_min_structures, opts.scatter_min_paths, True
            ):
                continue

            spec = self.rng.weighted_choice(table, weights)
            self._add_scattered(spec, position)
            placed += 1

            if spec.can_cluster and self.rng.random() < opts.scatter_cluster_chance:
                for _ in range(1 + int(self.rng.random() * 3)):
                    spot = nearby_position(self.rng, position, 1, 3)
                    if self.builder.is_valid(
                        spot, opts.scatter_min_structures, opts.scatter_min_paths, True
                    ):
                        self._add_scattered(spec, spot)
                        placed += 1

        logger.debug("Scattered objects generated", attempts=attempts, placed=placed)
        return placed

    def _add_scattered(self, spec: ObjectSpec, position: Vec3) -> EnvironmentObject:
        size = spec.min_size + self.rng.random() * (spec.max_size - spec.min_size)
        variant = int(self.rng.random() * spec.variants)
        glowing = spec.can_glow and self.rng.random() < self.options.glow_chance
        return self.builder.add_object(
            spec.type,
            position,
            size=size,
            variant=variant,
            glowing=glowing or None,
            scattered=True,
        )
