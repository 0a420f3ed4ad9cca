"""
Environment object catalog.

Typed tables describing which decorations each zone type favours, their size
ranges and weights, and the special features placed per primary zone.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class ObjectSpec:
    """A scatterable object kind."""

    type: str
    min_size: float
    max_size: float
    weight: float
    variants: int = 1
    can_cluster: bool = False
    can_glow: bool = False


@dataclass(frozen=True)
class SpecialFeatureSpec:
    """A landmark feature placed by the special-features pass."""

    type: str
    min_size: float
    max_size: float
    weight: float
    min_distance: float = 100.0
    max_distance: float = 350.0
    glowing: bool = False


COMMON_OBJECTS: Tuple[ObjectSpec, ...] = (
    ObjectSpec("rock", 0.4, 1.2, 5, variants=5, can_cluster=True),
    ObjectSpec("bush", 0.5, 1.5, 5, variants=3, can_cluster=True),
    ObjectSpec("flower", 0.3, 0.8, 4, variants=6, can_cluster=True, can_glow=True),
    ObjectSpec("tall_grass", 0.4, 1.0, 4, variants=3, can_cluster=True),
    ObjectSpec("small_plant", 0.3, 0.9, 3, variants=4, can_cluster=True),
)

ZONE_OBJECTS: Mapping[str, Tuple[ObjectSpec, ...]] = MappingProxyType(
    {
        "Forest": (
            ObjectSpec("tree", 0.8, 2.0, 8, variants=5),
            ObjectSpec("stump", 0.5, 1.2, 3, variants=3),
            ObjectSpec("fern", 0.4, 1.0, 4, variants=3, can_cluster=True),
            ObjectSpec("mushroom", 0.3, 0.7, 5, variants=4, can_cluster=True, can_glow=True),
            ObjectSpec("forest_debris", 0.4, 0.9, 3, variants=3),
            ObjectSpec("berry_bush", 0.5, 1.2, 3, variants=2, can_cluster=True),
        ),
        "Mountains": (
            ObjectSpec("snow_patch", 0.6, 1.8, 6, variants=3, can_cluster=True),
            ObjectSpec("ice_shard", 0.5, 1.5, 4, variants=3, can_cluster=True, can_glow=True),
            ObjectSpec("mountain_rock", 0.7, 2.0, 7, variants=4, can_cluster=True),
            ObjectSpec("pine_tree", 0.8, 2.2, 5, variants=3),
            ObjectSpec("alpine_flower", 0.3, 0.6, 3, variants=4, can_cluster=True),
        ),
        "Desert": (
            ObjectSpec("lava_rock", 0.5, 1.5, 6, variants=3, can_cluster=True, can_glow=True),
            ObjectSpec("obsidian", 0.4, 1.2, 4, variants=2, can_cluster=True),
            ObjectSpec("ember_vent", 0.3, 0.8, 3, variants=2, can_glow=True),
            ObjectSpec("ash_pile", 0.5, 1.3, 5, variants=3, can_cluster=True),
            ObjectSpec("desert_plant", 0.4, 1.0, 3, variants=3),
        ),
        "Swamp": (
            ObjectSpec("swamp_plant", 0.5, 1.4, 6, variants=4, can_cluster=True),
            ObjectSpec("lily_pad", 0.4, 1.0, 5, variants=3, can_cluster=True),
            ObjectSpec("swamp_tree", 0.8, 2.0, 4, variants=3),
            ObjectSpec("glowing_mushroom", 0.3, 0.8, 3, variants=4, can_cluster=True, can_glow=True),
            ObjectSpec("swamp_debris", 0.5, 1.2, 4, variants=3),
        ),
        "Ruins": (
            ObjectSpec("broken_column", 0.6, 1.8, 6, variants=4, can_cluster=True),
            ObjectSpec("statue_fragment", 0.4, 1.2, 5, variants=5, can_cluster=True),
            ObjectSpec("ancient_stone", 0.5, 1.5, 4, variants=3, can_cluster=True, can_glow=True),
            ObjectSpec("overgrown_ruin", 0.7, 2.0, 5, variants=3),
            ObjectSpec("rune_stone", 0.4, 1.0, 3, variants=4, can_glow=True),
        ),
    }
)

# Signature landmarks of each zone, reused by other themes for variety
CROSS_THEME_FEATURES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "Forest": ("ancient_tree", "fairy_circle", "mushroom_cluster", "forest_shrine"),
        "Mountains": ("ice_formation", "crystal_outcrop", "mountain_cave"),
        "Desert": ("oasis", "obsidian_formation", "desert_shrine"),
        "Swamp": ("swamp_light", "giant_mushroom", "bog_pit"),
        "Ruins": ("ancient_altar", "forgotten_statue", "magic_circle"),
    }
)

SPECIAL_FEATURES: Mapping[str, Tuple[SpecialFeatureSpec, ...]] = MappingProxyType(
    {
        "Forest": (
            SpecialFeatureSpec("ancient_tree", 8, 20, 6, min_distance=80),
            SpecialFeatureSpec("fairy_circle", 3, 6, 2, min_distance=80, glowing=True),
            SpecialFeatureSpec("mushroom_cluster", 2, 5, 2, min_distance=80),
            SpecialFeatureSpec("forest_shrine", 3, 6, 1, min_distance=80),
        ),
        "Mountains": (
            SpecialFeatureSpec("ice_formation", 5, 15, 6),
            SpecialFeatureSpec("crystal_outcrop", 3, 8, 2, glowing=True),
            SpecialFeatureSpec("mountain_cave", 6, 12, 1),
        ),
        "Desert": (
            SpecialFeatureSpec("oasis", 6, 14, 6),
            SpecialFeatureSpec("obsidian_formation", 3, 8, 2),
            SpecialFeatureSpec("desert_shrine", 3, 6, 1),
        ),
        "Swamp": (
            SpecialFeatureSpec("swamp_light", 3, 9, 6, min_distance=80, glowing=True),
            SpecialFeatureSpec("giant_mushroom", 4, 9, 2, min_distance=80),
            SpecialFeatureSpec("bog_pit", 3, 8, 2, min_distance=80),
        ),
        "Ruins": (
            SpecialFeatureSpec("ancient_statue", 4, 12, 6),
            SpecialFeatureSpec("ancient_altar", 3, 6, 2),
            SpecialFeatureSpec("forgotten_statue", 3, 8, 2),
            SpecialFeatureSpec("magic_circle", 4, 8, 1, glowing=True),
        ),
    }
)

GENERIC_SPECIAL_FEATURES: Tuple[SpecialFeatureSpec, ...] = (
    SpecialFeatureSpec("crystal_formation", 3, 10, 1, glowing=True),
    SpecialFeatureSpec("rare_plant", 3, 10, 1),
    SpecialFeatureSpec("magical_stone", 3, 10, 1, glowing=True),
    SpecialFeatureSpec("ancient_artifact", 3, 10, 1),
)

FLOWER_TYPES: Tuple[str, ...] = ("wildflower", "daisy", "tulip", "rose", "sunflower", "lily")


def scatter_table(zone_type: str) -> Tuple[ObjectSpec, ...]:
    """Common objects followed by the zone's own objects."""
    return COMMON_OBJECTS + ZONE_OBJECTS.get(zone_type, ())


def special_features(zone_type: str) -> Tuple[SpecialFeatureSpec, ...]:
    return SPECIAL_FEATURES.get(zone_type, GENERIC_SPECIAL_FEATURES)
