"""
World generation orchestrator.

Runs the pipeline stages in order on one exclusive builder:
zones -> paths -> structures -> environment -> connections -> compaction.
"""

import math
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config.config import settings
from ..config.themes import Theme, get_theme
from ..errors import ConfigurationError
from .builder import WorldBuilder
from .compaction import CompactionOptions, TreeCompactor
from .connectivity import ConnectivityOptions, StructureConnector
from .environment import EnvironmentOptions, EnvironmentScatter
from .models import Metadata, WorldDocument
from .paths import PathNetwork, PathOptions
from .seeded_prng import SeededRandom
from .structures import StructureOptions, StructurePlacer
from .zones import ZoneLayout, ZoneOptions

logger = structlog.get_logger()

# Maps below this size get their densities and counts scaled down
SMALL_MAP_SIZE = 100.0


class GeneratorOptions(BaseModel):
    """Options for every pipeline stage."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    zones: ZoneOptions = Field(default_factory=ZoneOptions)
    paths: PathOptions = Field(default_factory=PathOptions)
    structures: StructureOptions = Field(default_factory=StructureOptions)
    environment: EnvironmentOptions = Field(default_factory=EnvironmentOptions)
    connectivity: ConnectivityOptions = Field(default_factory=ConnectivityOptions)
    compaction: CompactionOptions = Field(
        default_factory=lambda: CompactionOptions(
            cell_size=settings.compaction_cell_size,
            keep_members=settings.compaction_keep_members,
        )
    )
    index_cell_size: float = Field(default=32.0, gt=0, description="Spatial index cell size")


def scale_small_map(theme: Theme, map_size: float) -> Theme:
    """
    Scale a theme's densities and counts down for a small map.

    The factor is map_size / 500, floored at 0.05. Villages and towers never
    drop below one.
    """
    factor = max(0.05, map_size / 500)
    features = theme.features

    def base(value, default):
        return default if value is None else value

    overrides = {
        "tree_density": base(features.tree_density, 0.8) * factor,
        "village_count": max(1, math.floor(base(features.village_count, 3) * factor)),
        "tower_count": max(1, math.floor(base(features.tower_count, 5) * factor)),
        "ruins_count": max(0, math.floor(base(features.ruins_count, 2) * factor)),
        "bridge_count": max(0, math.floor(base(features.bridge_count, 4) * factor)),
    }
    logger.debug("Scaling features for small map", map_size=map_size, factor=factor)
    return theme.with_features(overrides)


class WorldGenerator:
    """
    Generates themed world documents.

    A generator holds no state between runs: every call to generate() starts a
    fresh RNG stream from the seed and a fresh builder, so the same seed,
    theme and size always produce the same document.
    """

    def __init__(
        self,
        seed: Optional[Union[int, str]] = None,
        map_size: Optional[float] = None,
        options: Optional[GeneratorOptions] = None,
    ):
        if map_size is None:
            map_size = settings.default_map_size
        if map_size <= 0 or map_size > settings.max_map_size:
            raise ConfigurationError(
                f"Map size must be within (0, {settings.max_map_size}], got {map_size}"
            )
        if seed is None:
            seed = int(time.time() * 1000) % 2**31
        self.seed = SeededRandom(seed).seed
        self.map_size = float(map_size)
        self.options = options or GeneratorOptions()

    def resolve_theme(
        self, theme: Union[str, Theme], features: Optional[Mapping[str, Any]] = None
    ) -> Theme:
        """
        Resolve a theme name or instance and apply feature overrides.

        Raises:
            UnknownThemeError: If a theme name is not registered
            ConfigurationError: If the overrides are malformed
        """
        resolved = theme if isinstance(theme, Theme) else get_theme(theme)
        try:
            resolved = resolved.with_features(features)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid feature overrides: {e}") from e

        if self.map_size < SMALL_MAP_SIZE:
            resolved = scale_small_map(resolved, self.map_size)
        return resolved

    def generate(
        self,
        theme: Union[str, Theme],
        features: Optional[Mapping[str, Any]] = None,
        compact: bool = True,
        generated_at: Optional[str] = None,
    ) -> WorldDocument:
        """
        Generate a complete world document.

        Args:
            theme: Registry key (any case) or Theme instance
            features: Partial feature overrides
            compact: Run tree compaction before returning
            generated_at: Timestamp to record, defaults to now

        Returns:
            The generated WorldDocument
        """
        resolved = self.resolve_theme(theme, features)
        opts = self.options
        start = time.perf_counter()

        logger.info(
            "Generating world",
            theme=resolved.key,
            seed=self.seed,
            map_size=self.map_size,
        )

        rng = SeededRandom(self.seed)
        builder = WorldBuilder(resolved, self.map_size, opts.index_cell_size)

        ZoneLayout(builder, rng, opts.zones).generate()
        PathNetwork(builder, rng, opts.paths).generate()
        StructurePlacer(builder, rng, opts.structures).generate()
        EnvironmentScatter(builder, rng, opts.environment).generate()
        StructureConnector(builder, rng, opts.connectivity).generate()

        metadata = Metadata(
            seed=self.seed,
            size=self.map_size,
            generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
            theme_key=resolved.key,
        )
        document = builder.build(metadata)

        if compact:
            document = TreeCompactor(opts.compaction).compact(document)

        document.metadata.counts = {
            **document.stats(),
            **document.count_by_type("structures"),
        }

        logger.info(
            "World generated",
            theme=resolved.key,
            seed=self.seed,
            rng_calls=rng.call_count,
            elapsed=round(time.perf_counter() - start, 3),
            **document.stats(),
        )
        return document

    @staticmethod
    def export_json(document: WorldDocument, indent: Optional[int] = 2) -> str:
        return document.to_json(indent=indent)
