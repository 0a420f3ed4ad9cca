"""
Zone layout: boundary square, primary zone, secondary ring and sub-zones.

Zones are advisory colouring regions and may overlap freely.
"""

import math
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config.themes import DEFAULT_BOUNDARY_COLOR, ZONE_TYPES, resolve_zone_color
from .builder import WorldBuilder
from .models import Vec3, Zone, ZoneRole
from .seeded_prng import SeededRandom

logger = structlog.get_logger()


class ZoneOptions(BaseModel):
    """Zone layout options."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    primary_radius_factor: float = Field(
        default=0.5, description="Primary zone radius as a share of the boundary half size"
    )
    secondary_size_factor: float = Field(
        default=0.6, description="Nominal secondary zone radius as a share of half size"
    )
    secondary_offset_factor: float = Field(
        default=0.8, description="Secondary grid offset as a share of the nominal radius"
    )
    size_jitter_min: float = Field(default=0.7, description="Lower radius jitter factor")
    size_jitter_max: float = Field(default=1.3, description="Upper radius jitter factor")
    min_subzones: int = Field(default=5, ge=0, description="Minimum number of sub-zones")
    max_subzones: int = Field(default=15, ge=0, description="Sub-zone count upper bound")
    subzone_distance_factor: float = Field(
        default=0.8, description="Max sub-zone distance from the origin as a share of half size"
    )
    subzone_min_radius: float = Field(default=30.0, description="Sub-zone min radius")
    subzone_max_radius: float = Field(default=100.0, description="Sub-zone max radius")

    @model_validator(mode="after")
    def _check_ranges(self) -> "ZoneOptions":
        if self.max_subzones < self.min_subzones:
            raise ValueError("max_subzones must not be below min_subzones")
        return self


# Secondary zones sit on a 3x3 grid without its centre cell
SECONDARY_GRID = (
    (-1, 0),
    (1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 1),
    (0, 1),
    (1, 1),
)


class ZoneLayout:
    """Partitions the world into boundary, primary, secondary and sub-zones."""

    def __init__(
        self,
        builder: WorldBuilder,
        rng: SeededRandom,
        options: Optional[ZoneOptions] = None,
    ):
        self.builder = builder
        self.rng = rng
        self.options = options or ZoneOptions()
        self.theme = builder.theme

        primary = self.theme.primary_zone
        self.zone_types = [primary, primary, *ZONE_TYPES]

    def generate(self) -> List[Zone]:
        """Append all zones to the builder in layout order."""
        logger.info("Generating zones", theme=self.theme.key)

        zones = [self._boundary_zone(), self._primary_zone()]
        zones.extend(self._secondary_zones())
        zones.extend(self._sub_zones())

        for zone in zones:
            self.builder.add_zone(zone)

        logger.info("Zones generated", count=len(zones))
        return zones

    def _boundary_zone(self) -> Zone:
        h = self.builder.boundary_half_size
        return Zone(
            id="boundary",
            name="Boundary",
            type="boundary",
            role=ZoneRole.BOUNDARY,
            points=[
                Vec3(x=-h, z=-h),
                Vec3(x=h, z=-h),
                Vec3(x=h, z=h),
                Vec3(x=-h, z=h),
            ],
            color=self.theme.color("boundary") or DEFAULT_BOUNDARY_COLOR,
        )

    def _primary_zone(self) -> Zone:
        zone_type = self.theme.primary_zone
        origin = Vec3()
        return Zone(
            id="primary",
            name=zone_type,
            type=zone_type.lower(),
            role=ZoneRole.PRIMARY,
            center=origin,
            position=origin,
            radius=self.builder.boundary_half_size * self.options.primary_radius_factor,
            color=resolve_zone_color(zone_type, self.theme),
        )

    def _secondary_zones(self) -> List[Zone]:
        opts = self.options
        zone_size = self.builder.boundary_half_size * opts.secondary_size_factor
        offset = zone_size * opts.secondary_offset_factor

        zones = []
        for i, (gx, gz) in enumerate(SECONDARY_GRID):
            zone_type = self.zone_types[i % len(self.zone_types)]
            variation = opts.size_jitter_min + self.rng.random() * (
                opts.size_jitter_max - opts.size_jitter_min
            )
            center = Vec3(x=gx * offset, z=gz * offset)
            zones.append(
                Zone(
                    id=f"zone_{i}",
                    name=zone_type,
                    type=zone_type.lower(),
                    role=ZoneRole.SECONDARY,
                    center=center,
                    position=center,
                    radius=zone_size * variation,
                    color=resolve_zone_color(zone_type, self.theme),
                )
            )
        return zones

    def _sub_zones(self) -> List[Zone]:
        opts = self.options
        scale = self.builder.scale
        count = math.floor(
            opts.min_subzones + self.rng.random() * (opts.max_subzones - opts.min_subzones)
        )

        zones = []
        for i in range(count):
            angle = self.rng.random() * math.pi * 2
            distance = self.rng.random() * self.builder.boundary_half_size * opts.subzone_distance_factor
            center = Vec3(x=math.cos(angle) * distance, z=math.sin(angle) * distance)

            zone_type = self.rng.choice(self.zone_types)
            radius = (
                opts.subzone_min_radius
                + self.rng.random() * (opts.subzone_max_radius - opts.subzone_min_radius)
            ) * scale

            zones.append(
                Zone(
                    id=f"subzone_{i}",
                    name=zone_type,
                    type=zone_type.lower(),
                    role=ZoneRole.SUB,
                    center=center,
                    position=center,
                    radius=radius,
                    color=resolve_zone_color(zone_type, self.theme),
                )
            )
        return zones
