"""
Village construction in four layout styles.

Each village picks one style uniformly at random and keeps it:

- circular: plaza, a ring of important buildings, a ring of houses,
  spokes to the plaza and short lanes between close neighbours
- grid: lattice of buildings around a central square with streets
- riverside: buildings flanking a sinuous main street with a market
- terraced: concentric rings rising towards a hilltop temple

Every style then scatters a few loose trees, bushes and rocks around the
village footprint. Building sizes and village internals are not scaled with
the map.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .models import (
    VILLAGE_LAYOUTS,
    Building,
    BuildingConnection,
    CentralFeature,
    Vec3,
    Village,
    VillageDecoration,
    VillagePath,
)
from .seeded_prng import SeededRandom

logger = structlog.get_logger()

IMPORTANT_BUILDING_SCALE = {"temple": 1.5, "tavern": 1.3, "shop": 1.2}
TERRACE_BUILDING_SCALE = {"temple": 1.4, "shop": 1.1, "house": 1.0}


class VillageOptions(BaseModel):
    """Village builder options."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    min_buildings: int = Field(default=10, ge=1, description="Minimum buildings per village")
    building_spread: int = Field(default=12, ge=1, description="Random extra buildings (exclusive)")
    neighbour_radius: float = Field(
        default=20.0, description="Max distance for lanes between neighbouring buildings"
    )
    neighbour_link_chance: float = Field(
        default=0.7, description="Chance a building gets a lane to its nearest neighbour"
    )
    decoration_min_distance: float = Field(default=20.0, description="Loose decoration inner radius")
    decoration_max_distance: float = Field(default=35.0, description="Loose decoration outer radius")
    terrace_step: float = Field(default=2.0, description="Height between terraces")


@dataclass
class _VillageParts:
    """Mutable accumulator for one village while it is being laid out."""

    buildings: List[Building] = field(default_factory=list)
    decorations: List[VillageDecoration] = field(default_factory=list)
    paths: List[VillagePath] = field(default_factory=list)
    connections: List[BuildingConnection] = field(default_factory=list)
    central_feature: Optional[CentralFeature] = None


class VillageBuilder:
    """Builds composite village structures."""

    def __init__(self, rng: SeededRandom, theme_name: str, options: Optional[VillageOptions] = None):
        self.rng = rng
        self.theme_name = theme_name
        self.options = options or VillageOptions()

    def build(self, position: Vec3, village_id: str, cluster: Optional[int] = None) -> Village:
        """
        Lay out one village around position.

        Args:
            position: Village centre
            village_id: Structure id
            cluster: Index of the structure cluster the village belongs to

        Returns:
            Complete Village record
        """
        rng = self.rng
        style = int(rng.random() * 4)
        building_count = self.options.min_buildings + int(rng.random() * self.options.building_spread)

        parts = _VillageParts()
        layout = VILLAGE_LAYOUTS[style]
        builders = (self._circular, self._grid, self._riverside, self._terraced)
        builders[style](parts, position, building_count)

        self._scatter_surroundings(parts, position)

        logger.debug(
            "Village built",
            village_id=village_id,
            layout=layout.value,
            buildings=len(parts.buildings),
        )

        return Village(
            id=village_id,
            position=position,
            theme=self.theme_name,
            cluster=cluster,
            style=style,
            layout=layout,
            building_count=len(parts.buildings),
            buildings=parts.buildings,
            decorations=parts.decorations,
            paths=parts.paths,
            connections=parts.connections,
            central_feature=parts.central_feature,
        )

    def _building_style(self) -> int:
        return int(self.rng.random() * 3)

    def _circular(self, parts: _VillageParts, position: Vec3, building_count: int) -> None:
        rng = self.rng
        plaza_radius = 6 + rng.random() * 3
        parts.central_feature = CentralFeature(
            type="plaza", position=Vec3(x=position.x, z=position.z), radius=plaza_radius
        )

        # First ring: important buildings close to the plaza
        first_ring = 3 + int(rng.random() * 3)
        for i in range(first_ring):
            angle = (i / first_ring) * math.pi * 2
            distance = plaza_radius + 2 + rng.random() * 3

            if rng.random() < 0.4:
                building_type = "temple"
            elif rng.random() < 0.6:
                building_type = "shop"
            else:
                building_type = "tavern"
            scale = IMPORTANT_BUILDING_SCALE[building_type]

            parts.buildings.append(
                Building(
                    type=building_type,
                    position=Vec3(
                        x=position.x + math.cos(angle) * distance,
                        z=position.z + math.sin(angle) * distance,
                    ),
                    rotation=angle + math.pi,
                    width=(3 + rng.random() * 2) * scale,
                    depth=(3 + rng.random() * 2) * scale,
                    height=(2 + rng.random() * 1.5) * scale,
                    style=self._building_style(),
                    ring=1,
                )
            )

        # Second ring: houses, staggered against the first ring
        second_ring = building_count - first_ring
        for i in range(second_ring):
            angle = (0.5 / second_ring) * math.pi * 2 + (i / second_ring) * math.pi * 2
            ring_radius = plaza_radius + 8 + rng.random() * 4
            cluster_variation = rng.random() * 3 if i % 3 == 0 else 0
            distance = ring_radius + cluster_variation

            building_type = "house" if rng.random() < 0.85 else "shop"
            scale = 1.1 if building_type == "shop" else 1.0

            lateral = rng.random() * 2 - 1
            lateral_angle = angle + math.pi / 2
            building_position = Vec3(
                x=position.x + math.cos(angle) * distance + math.cos(lateral_angle) * lateral,
                z=position.z + math.sin(angle) * distance + math.sin(lateral_angle) * lateral,
            )
            rotation_variation = rng.random() * 0.4 - 0.2

            parts.buildings.append(
                Building(
                    type=building_type,
                    position=building_position,
                    rotation=angle + math.pi + rotation_variation,
                    width=(2.5 + rng.random() * 1.5) * scale,
                    depth=(2.5 + rng.random() * 1.5) * scale,
                    height=(2 + rng.random() * 1) * scale,
                    style=self._building_style(),
                    ring=2,
                )
            )

            if rng.random() < 0.4:
                if rng.random() < 0.5:
                    decor_type = "garden"
                elif rng.random() < 0.5:
                    decor_type = "well"
                else:
                    decor_type = "woodpile"
                decor_distance = 2 + rng.random() * 1.5
                decor_angle = angle + (rng.random() * math.pi / 2 - math.pi / 4)
                parts.decorations.append(
                    VillageDecoration(
                        type=decor_type,
                        position=Vec3(
                            x=building_position.x + math.cos(decor_angle) * decor_distance,
                            z=building_position.z + math.sin(decor_angle) * decor_distance,
                        ),
                        rotation=rng.random() * math.pi * 2,
                        size=0.6 + rng.random() * 0.4,
                    )
                )

        # Plaza decorations
        for _ in range(2 + int(rng.random() * 2)):
            angle = rng.random() * math.pi * 2
            distance = rng.random() * plaza_radius * 0.6
            if rng.random() < 0.4:
                decor_type = "statue"
            elif rng.random() < 0.6:
                decor_type = "fountain"
            else:
                decor_type = "market_stall"
            parts.decorations.append(
                VillageDecoration(
                    type=decor_type,
                    position=Vec3(
                        x=position.x + math.cos(angle) * distance,
                        z=position.z + math.sin(angle) * distance,
                    ),
                    rotation=rng.random() * math.pi * 2,
                    size=0.8 + rng.random() * 0.4,
                )
            )

        parts.paths.append(
            VillagePath(
                type="circle",
                center=Vec3(x=position.x, z=position.z),
                radius=plaza_radius + 2,
                width=2 + rng.random(),
                path_type="main",
            )
        )

        self._link_buildings(parts, position)

    def _link_buildings(self, parts: _VillageParts, position: Vec3) -> None:
        """Spokes from every building to the plaza plus lanes to close neighbours."""
        rng = self.rng
        buildings = parts.buildings
        plaza = Vec3(x=position.x, z=position.z)

        for i, building in enumerate(buildings):
            bp = building.position
            parts.paths.append(
                VillagePath(
                    type="line",
                    points=[plaza, Vec3(x=bp.x, z=bp.z)],
                    width=1 + rng.random() * 0.5,
                    path_type="secondary",
                )
            )

            if i == 0 or rng.random() >= self.options.neighbour_link_chance:
                continue

            nearest = -1
            min_dist = math.inf
            for j, other in enumerate(buildings):
                if i == j:
                    continue
                dist = bp.distance_xz(other.position)
                if dist < min_dist and dist < self.options.neighbour_radius:
                    min_dist = dist
                    nearest = j

            if nearest < 0:
                continue

            op = buildings[nearest].position
            mid_x = (bp.x + op.x) / 2
            mid_z = (bp.z + op.z) / 2
            perp_x = -(op.z - bp.z)
            perp_z = op.x - bp.x
            perp_len = math.hypot(perp_x, perp_z)
            curve_factor = (rng.random() * 2 - 1) * 0.2

            if perp_len > 0:
                control = Vec3(
                    x=mid_x + (perp_x / perp_len) * curve_factor * min_dist,
                    z=mid_z + (perp_z / perp_len) * curve_factor * min_dist,
                )
            else:
                control = Vec3(x=mid_x, z=mid_z)

            parts.paths.append(
                VillagePath(
                    type="curve",
                    points=[Vec3(x=bp.x, z=bp.z), control, Vec3(x=op.x, z=op.z)],
                    width=1 + rng.random() * 0.5,
                    path_type="tertiary",
                )
            )
            parts.connections.append(BuildingConnection(from_=i, to=nearest, type="path"))

    def _grid(self, parts: _VillageParts, position: Vec3, building_count: int) -> None:
        rng = self.rng
        grid_size = int(math.sqrt(building_count)) + 1
        spacing = 12 + rng.random() * 4
        grid_offset = (grid_size - 1) * spacing / 2
        centre = grid_size // 2

        parts.central_feature = CentralFeature(
            type="square", position=Vec3(x=position.x, z=position.z), size=spacing * 1.5
        )

        placed = 0
        for row in range(grid_size):
            for col in range(grid_size):
                if row == centre and col == centre:
                    continue
                if placed >= building_count:
                    continue

                base_x = position.x - grid_offset + col * spacing
                base_z = position.z - grid_offset + row * spacing
                offset_x = (rng.random() - 0.5) * 3
                offset_z = (rng.random() - 0.5) * 3

                building_type = self._common_building_type()
                scale = {"temple": 1.5, "shop": 1.2}.get(building_type, 1.0)

                # Face the nearest outer street
                if row == 0:
                    rotation = math.pi / 2
                elif col == 0:
                    rotation = 0.0
                elif row == grid_size - 1:
                    rotation = -math.pi / 2
                elif col == grid_size - 1:
                    rotation = math.pi
                else:
                    rotation = int(rng.random() * 4) * (math.pi / 2)

                parts.buildings.append(
                    Building(
                        type=building_type,
                        position=Vec3(x=base_x + offset_x, z=base_z + offset_z),
                        rotation=rotation,
                        width=(3 + rng.random() * 3) * scale,
                        depth=(3 + rng.random() * 3) * scale,
                        height=(2 + rng.random() * 2) * scale,
                        style=self._building_style(),
                    )
                )
                placed += 1

        for i in range(grid_size + 1):
            line = -grid_offset + i * spacing
            width = 4.0 if i == centre else 3.0
            path_type = "main" if i == centre else "street"
            parts.paths.append(
                VillagePath(
                    type="line",
                    points=[
                        Vec3(x=position.x - grid_offset - 5, z=position.z + line),
                        Vec3(x=position.x + grid_offset + 5, z=position.z + line),
                    ],
                    width=width,
                    path_type=path_type,
                )
            )
            parts.paths.append(
                VillagePath(
                    type="line",
                    points=[
                        Vec3(x=position.x + line, z=position.z - grid_offset - 5),
                        Vec3(x=position.x + line, z=position.z + grid_offset + 5),
                    ],
                    width=width,
                    path_type=path_type,
                )
            )

        square_size = parts.central_feature.size
        for _ in range(2 + int(rng.random() * 3)):
            if rng.random() < 0.6:
                decor_type = "statue"
            elif rng.random() < 0.5:
                decor_type = "fountain"
            else:
                decor_type = "well"
            parts.decorations.append(
                VillageDecoration(
                    type=decor_type,
                    position=Vec3(
                        x=position.x + (rng.random() - 0.5) * square_size * 0.6,
                        z=position.z + (rng.random() - 0.5) * square_size * 0.6,
                    ),
                    size=1 + rng.random() * 1.5,
                )
            )

    def _common_building_type(self) -> str:
        if self.rng.random() < 0.7:
            return "house"
        return "shop" if self.rng.random() < 0.5 else "temple"

    def _riverside(self, parts: _VillageParts, position: Vec3, building_count: int) -> None:
        rng = self.rng
        length = 60 + rng.random() * 40
        segments = 5 + int(rng.random() * 3)

        spine = []
        for i in range(segments + 1):
            t = i / segments
            amplitude = 10 + rng.random() * 15
            sign = 1 if rng.random() < 0.5 else -1
            spine.append(
                Vec3(
                    x=position.x + (t - 0.5) * length,
                    z=position.z + math.sin(t * math.pi) * amplitude * sign,
                )
            )

        parts.paths.append(VillagePath(type="line", points=spine, width=4, path_type="main"))

        for _ in range(building_count):
            segment = int(rng.random() * segments)
            t = rng.random()
            start, end = spine[segment], spine[segment + 1]

            along_x = start.x + (end.x - start.x) * t
            along_z = start.z + (end.z - start.z) * t
            side = 1 if rng.random() < 0.5 else -1

            perp_x = -(end.z - start.z)
            perp_z = end.x - start.x
            perp_len = math.hypot(perp_x, perp_z)
            norm_x = perp_x / perp_len
            norm_z = perp_z / perp_len

            distance = 6 + rng.random() * 4
            rotation = math.atan2(norm_x, norm_z) + (math.pi if side > 0 else 0)

            building_type = self._common_building_type()
            scale = {"temple": 1.5, "shop": 1.2}.get(building_type, 1.0)

            parts.buildings.append(
                Building(
                    type=building_type,
                    position=Vec3(
                        x=along_x + norm_x * distance * side,
                        z=along_z + norm_z * distance * side,
                    ),
                    rotation=rotation,
                    width=(3 + rng.random() * 3) * scale,
                    depth=(3 + rng.random() * 3) * scale,
                    height=(2 + rng.random() * 2) * scale,
                    style=self._building_style(),
                )
            )

        midpoint = spine[segments // 2]
        market_z = midpoint.z + (10 if rng.random() < 0.5 else -10)
        parts.central_feature = CentralFeature(
            type="market", position=Vec3(x=midpoint.x, z=market_z), size=8 + rng.random() * 4
        )

        market = parts.central_feature.position
        for _ in range(2 + int(rng.random() * 2)):
            decor_type = "well" if rng.random() < 0.5 else "statue"
            parts.decorations.append(
                VillageDecoration(
                    type=decor_type,
                    position=Vec3(
                        x=market.x + (rng.random() - 0.5) * 10,
                        z=market.z + (rng.random() - 0.5) * 10,
                    ),
                    size=1 + rng.random(),
                )
            )

    def _terraced(self, parts: _VillageParts, position: Vec3, building_count: int) -> None:
        rng = self.rng
        step = self.options.terrace_step
        terrace_count = 3 + int(rng.random() * 2)
        terrace_radius = 15 + rng.random() * 10

        summit = Vec3(x=position.x, y=terrace_count * step, z=position.z)
        parts.central_feature = CentralFeature(
            type="temple", position=summit, size=6 + rng.random() * 3
        )
        parts.buildings.append(
            Building(
                type="temple",
                position=summit,
                rotation=rng.random() * math.pi * 2,
                width=6 + rng.random() * 2,
                depth=6 + rng.random() * 2,
                height=5 + rng.random() * 2,
                style=self._building_style(),
                terrace=terrace_count,
            )
        )

        def ring_radius(terrace: int) -> float:
            return terrace_radius + (terrace_count - terrace) * 8

        per_terrace = building_count // terrace_count
        for terrace in range(terrace_count):
            height = terrace * step
            radius = ring_radius(terrace)

            parts.paths.append(
                VillagePath(
                    type="circle",
                    center=Vec3(x=position.x, y=height, z=position.z),
                    radius=radius,
                    width=2.5,
                    path_type="terrace",
                )
            )

            count = per_terrace + (building_count % terrace_count if terrace == 0 else 0)
            for i in range(count):
                angle = (i / count) * math.pi * 2 + (rng.random() - 0.5) * 0.2
                distance = radius - 3 - rng.random() * 2

                # Upper terraces hold the more important buildings
                roll = rng.random()
                if terrace >= terrace_count - 2:
                    building_type = "house" if roll < 0.6 else ("shop" if roll < 0.8 else "temple")
                else:
                    building_type = "house" if roll < 0.8 else "shop"
                scale = TERRACE_BUILDING_SCALE[building_type]

                parts.buildings.append(
                    Building(
                        type=building_type,
                        position=Vec3(
                            x=position.x + math.cos(angle) * distance,
                            y=height,
                            z=position.z + math.sin(angle) * distance,
                        ),
                        rotation=angle + math.pi,
                        width=(2.5 + rng.random() * 2) * scale,
                        depth=(2.5 + rng.random() * 2) * scale,
                        height=(2 + rng.random() * 1.5) * scale,
                        style=self._building_style(),
                        terrace=terrace,
                    )
                )

        for terrace in range(terrace_count):
            stair_angle = (terrace / terrace_count) * math.pi * 2
            radius = ring_radius(terrace)
            parts.decorations.append(
                VillageDecoration(
                    type="stairs",
                    position=Vec3(
                        x=position.x + math.cos(stair_angle) * radius,
                        y=terrace * step,
                        z=position.z + math.sin(stair_angle) * radius,
                    ),
                    rotation=stair_angle + math.pi,
                    width=4 + rng.random(),
                    height=step,
                )
            )

        for _ in range(3 + int(rng.random() * 3)):
            terrace = int(rng.random() * terrace_count)
            angle = rng.random() * math.pi * 2
            distance = ring_radius(terrace) * 0.8 * rng.random()
            decor_type = "statue" if rng.random() < 0.7 else "fountain"
            parts.decorations.append(
                VillageDecoration(
                    type=decor_type,
                    position=Vec3(
                        x=position.x + math.cos(angle) * distance,
                        y=terrace * step,
                        z=position.z + math.sin(angle) * distance,
                    ),
                    size=1 + rng.random(),
                )
            )

    def _scatter_surroundings(self, parts: _VillageParts, position: Vec3) -> None:
        rng = self.rng
        opts = self.options
        for _ in range(5 + int(rng.random() * 10)):
            angle = rng.random() * math.pi * 2
            distance = opts.decoration_min_distance + rng.random() * (
                opts.decoration_max_distance - opts.decoration_min_distance
            )
            if rng.random() < 0.5:
                env_type = "tree"
            elif rng.random() < 0.7:
                env_type = "bush"
            else:
                env_type = "rock"
            parts.decorations.append(
                VillageDecoration(
                    type=env_type,
                    position=Vec3(
                        x=position.x + math.cos(angle) * distance,
                        z=position.z + math.sin(angle) * distance,
                    ),
                    size=0.8 + rng.random() * 0.4,
                )
            )
