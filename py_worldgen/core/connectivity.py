"""
Connectivity pass: curved roads between nearby structures.
"""

import math
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .builder import WorldBuilder
from .models import Path, PathPattern
from .paths import DEFAULT_PATH_WIDTH, midpoint_curve
from .seeded_prng import SeededRandom

logger = structlog.get_logger()


class ConnectivityOptions(BaseModel):
    """Connection road options. Distances are given for a 1000-unit map."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    max_distance: float = Field(default=150.0, description="Max distance between linked structures")
    link_chance: float = Field(default=0.4, ge=0, le=1, description="Chance to link a close pair")
    curve_offset: float = Field(default=25.0, description="Max midpoint displacement")
    width_factor: float = Field(default=0.6, gt=0, description="Width relative to main roads")


class StructureConnector:
    """Links close structure pairs with narrow curved roads."""

    def __init__(
        self,
        builder: WorldBuilder,
        rng: SeededRandom,
        options: Optional[ConnectivityOptions] = None,
    ):
        self.builder = builder
        self.rng = rng
        self.options = options or ConnectivityOptions()

    def generate(self) -> List[Path]:
        opts = self.options
        structures = self.builder.structures
        max_distance = opts.max_distance * self.builder.scale
        width = (self.builder.theme.features.path_width or DEFAULT_PATH_WIDTH) * opts.width_factor

        added = []
        for i, a in enumerate(structures):
            for j in range(i + 1, len(structures)):
                b = structures[j]
                distance = math.hypot(b.position.x - a.position.x, b.position.z - a.position.z)
                if distance >= max_distance or self.rng.random() >= opts.link_chance:
                    continue

                points = midpoint_curve(self.rng, a.position, b.position, opts.curve_offset)
                path = self.builder.add_path(
                    f"connection_{i}_{j}",
                    points,
                    width,
                    PathPattern.CURVED,
                    type="connection",
                    connects=(i, j),
                )
                if path is not None:
                    added.append(path)

        logger.info("Structure connections generated", count=len(added))
        return added
