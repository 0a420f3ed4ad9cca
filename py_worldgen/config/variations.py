"""
Preset map variations and named theme combinations.

A variation is a set of feature overrides applied on top of any registered
theme ("Dense", "Ruined", ...). A combination mixes two registered themes and
then applies its own overrides ("Volcanic Forest", ...).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .themes import Theme, get_theme, mix_themes

# Tree density ceilings for forest-heavy random maps
DARK_FOREST_TREE_CAP = 0.15
DARK_FOREST_MIX_TREE_CAP = 0.2


@dataclass(frozen=True)
class MapVariation:
    """Named feature overrides applicable to any theme."""

    name: str
    features: Mapping[str, Any]
    # Counts drawn per map as randint(0, upper - 1)
    random_counts: Mapping[str, int] = field(default_factory=dict)

    def resolve(self, rng) -> Dict[str, Any]:
        features = dict(self.features)
        for feature, upper in self.random_counts.items():
            features[feature] = int(rng.random() * upper)
        return features


@dataclass(frozen=True)
class ThemeCombination:
    """A named mix of two registered themes."""

    name: str
    description: str
    base_theme: str
    mixin_theme: str
    mix_ratio: float
    features: Mapping[str, Any]

    def build(self) -> Theme:
        base = get_theme(self.base_theme)
        mixin = get_theme(self.mixin_theme)
        theme = mix_themes(base, mixin, self.mix_ratio, name=self.name, description=self.description)
        if "DARK_FOREST" in (base.key, mixin.key):
            density = min(theme.features.tree_density or 0.0, DARK_FOREST_MIX_TREE_CAP)
            theme = theme.with_features({"treeDensity": density})
        return theme.with_features(self.features)


MAP_VARIATIONS: Tuple[MapVariation, ...] = (
    MapVariation("Dense", {"treeDensity": 1.2, "villageCount": 5, "towerCount": 8}),
    MapVariation("Sparse", {"treeDensity": 0.4, "villageCount": 1, "towerCount": 2}),
    MapVariation("Ruined", {"ruinsCount": 15, "villageCount": 0, "towerCount": 1}),
    MapVariation("Fortified", {"towerCount": 12, "bridgeCount": 8, "villageCount": 3}),
    MapVariation(
        "Wilderness",
        {"treeDensity": 1.5, "villageCount": 0, "towerCount": 0, "ruinsCount": 0},
    ),
    MapVariation("Populated", {"villageCount": 8, "pathWidth": 4, "bridgeCount": 10}),
    MapVariation("Ancient", {"ruinsCount": 20, "darkSanctumCount": 5}),
    MapVariation("Mystical", {"darkSanctumCount": 8, "lavaDensity": 0.8}),
    MapVariation("Mountainous", {"mountainDensity": 1.5, "bridgeCount": 12}),
    MapVariation("Flooded", {"waterDensity": 1.2, "bridgeCount": 15}),
    MapVariation(
        "Hybrid",
        {"treeDensity": 0.7, "mountainDensity": 0.7, "waterDensity": 0.7, "lavaDensity": 0.3},
    ),
    MapVariation(
        "Extreme",
        {
            "treeDensity": 2.0,
            "villageCount": 10,
            "towerCount": 15,
            "ruinsCount": 20,
            "bridgeCount": 20,
        },
    ),
    MapVariation(
        "Minimal",
        {"treeDensity": 0.2, "villageCount": 1, "towerCount": 1, "ruinsCount": 1, "bridgeCount": 1},
    ),
    MapVariation(
        "Chaotic", {"pathWidth": 5}, random_counts={"villageCount": 10, "towerCount": 15}
    ),
    MapVariation("Peaceful", {"villageCount": 6, "towerCount": 0, "darkSanctumCount": 0}),
)

THEME_COMBINATIONS: Tuple[ThemeCombination, ...] = (
    ThemeCombination(
        "Volcanic Forest",
        "A forest gradually being consumed by volcanic activity",
        "DARK_FOREST",
        "LAVA_ZONE",
        0.4,
        {"treeDensity": 0.6, "lavaDensity": 0.5, "darkSanctumCount": 2, "ruinsCount": 5},
    ),
    ThemeCombination(
        "Frozen Ruins",
        "Ancient ruins covered in ice and snow",
        "ANCIENT_RUINS",
        "FROZEN_MOUNTAINS",
        0.6,
        {"ruinsDensity": 0.7, "mountainDensity": 0.8, "bridgeCount": 10},
    ),
    ThemeCombination(
        "Swamp Sanctum",
        "Dark sanctums rising from murky swamp waters",
        "MYSTICAL_SWAMP",
        "LAVA_ZONE",
        0.3,
        {"waterDensity": 0.9, "darkSanctumCount": 7, "bridgeCount": 12},
    ),
    ThemeCombination(
        "Mountain Forest",
        "Dense forests growing on steep mountain slopes",
        "FROZEN_MOUNTAINS",
        "DARK_FOREST",
        0.5,
        {"treeDensity": 1.0, "mountainDensity": 1.0, "villageCount": 4, "towerCount": 6},
    ),
    ThemeCombination(
        "Ruined Desert",
        "Ancient ruins scattered across a vast desert landscape",
        "ANCIENT_RUINS",
        "LAVA_ZONE",
        0.4,
        {"ruinsDensity": 1.2, "villageCount": 2, "towerCount": 8},
    ),
)

VARIATIONS_BY_NAME: Mapping[str, MapVariation] = MappingProxyType(
    {variation.name: variation for variation in MAP_VARIATIONS}
)


def apply_variation(theme: Theme, variation: MapVariation, rng) -> Theme:
    """
    Derive a varied theme from a registered one.

    DARK_FOREST tree density is capped before the variation applies, so
    only an explicit variation density can raise it again.
    """
    if theme.key == "DARK_FOREST":
        density = min(theme.features.tree_density or 0.0, DARK_FOREST_TREE_CAP)
        theme = theme.with_features({"treeDensity": density})
    return theme.with_features(variation.resolve(rng))
