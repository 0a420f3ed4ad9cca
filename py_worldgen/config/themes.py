"""
Theme registry: colour palettes and feature parameters for each world theme.

Themes are immutable catalog entries loaded once at import time. Derived
themes (feature overrides, mixes of two themes, random palettes) are built as
new independent values and never patched into the registry.
"""

from __future__ import annotations

import colorsys
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..errors import UnknownThemeError

# Enhanced zone colours, keyed by zone type
ZONE_COLORS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "Forest": MappingProxyType(
            {
                "foliage": "#1E5631",
                "trunk": "#8B4513",
                "ground": "#5E7742",
                "rock": "#708090",
                "structure": "#36454F",
                "accent": "#FFCC00",
                "path": "#A0522D",
            }
        ),
        "Desert": MappingProxyType(
            {
                "sand": "#E9BE62",
                "rock": "#A0522D",
                "vegetation": "#7D9C42",
                "sky": "#87CEEB",
                "structure": "#D2B48C",
                "accent": "#FF4500",
                "path": "#D2B48C",
            }
        ),
        "Mountains": MappingProxyType(
            {
                "snow": "#FFFFFF",
                "ice": "#A5D8E6",
                "rock": "#6D6552",
                "structure": "#8CADD6",
                "vegetation": "#2E8B57",
                "accent": "#C9E4CA",
                "path": "#8E7F6D",
            }
        ),
        "Swamp": MappingProxyType(
            {
                "water": "#3A7D7D",
                "vegetation": "#4A6C2F",
                "ground": "#4D5645",
                "structure": "#708090",
                "rock": "#36454F",
                "accent": "#40E0D0",
                "path": "#5D4037",
            }
        ),
        "Ruins": MappingProxyType(
            {
                "stone": "#7D7D7D",
                "ground": "#6D7254",
                "vegetation": "#556B2F",
                "structure": "#4A4A4A",
                "accent": "#9370DB",
                "path": "#696969",
            }
        ),
        "Dark Sanctum": MappingProxyType(
            {
                "structure": "#0C0C0C",
                "fire": "#FF4500",
                "ground": "#3D2B22",
                "accent": "#8B0000",
                "glow": "#E3CF57",
                "path": "#2A0A0A",
            }
        ),
        "Terrant": MappingProxyType(
            {
                "soil": "#E5C09A",
                "rock": "#696969",
                "vegetation": "#228B22",
                "crystal": "#7B68EE",
                "structure": "#4A4A4A",
                "accent": "#DAA520",
                "water": "#1E90FF",
                "glow": "#32CD32",
                "path": "#B8A888",
            }
        ),
    }
)

HOT_ZONE_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "lava": "#FF5722",
        "magma": "#FF8A65",
        "ground": "#2D2D2D",
        "ash": "#BEBEBE",
        "glow": "#FFEB3B",
        "ember": "#FF9800",
        "path": "#3E2723",
    }
)

# Zone types available to layouts, in the order zone layouts cycle through them
ZONE_TYPES: Tuple[str, ...] = ("Forest", "Mountains", "Desert", "Swamp", "Ruins", "Lava")

DEFAULT_ZONE_COLOR = "#555555"
DEFAULT_BOUNDARY_COLOR = "#444444"

# Palette roles tried, in order, for the ground colour of a zone
THEME_GROUND_ROLES = ("ground", "soil", "sand", "foliage")
GENERIC_GROUND_ROLES = ("soil", "sand", "foliage")

# Roles a generated palette provides, with (hue offset, saturation, value)
_RANDOM_PALETTE_ROLES = {
    "ground": (0.0, 0.45, 0.45),
    "foliage": (0.08, 0.65, 0.35),
    "rock": (0.5, 0.1, 0.5),
    "structure": (0.55, 0.25, 0.3),
    "accent": (0.33, 0.8, 0.95),
    "path": (0.04, 0.35, 0.55),
    "glow": (0.66, 0.6, 1.0),
}

_INTEGER_FEATURES = {
    "village_count",
    "tower_count",
    "ruins_count",
    "bridge_count",
    "dark_sanctum_count",
    "mountain_range_count",
    "water_feature_count",
    "special_feature_count",
}


class ThemeFeatures(BaseModel):
    """Density and count parameters controlling a world's character."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    tree_density: Optional[float] = Field(default=None, ge=0, description="Tree density factor")
    mountain_density: Optional[float] = Field(default=None, ge=0, description="Mountain density")
    lava_density: Optional[float] = Field(default=None, ge=0, description="Lava density")
    water_density: Optional[float] = Field(default=None, ge=0, description="Water density")
    ruins_density: Optional[float] = Field(default=None, ge=0, description="Ruins density")
    path_width: Optional[float] = Field(default=None, gt=0, description="Main road width")
    village_count: Optional[int] = Field(default=None, ge=0, description="Base village count")
    tower_count: Optional[int] = Field(default=None, ge=0, description="Base tower count")
    ruins_count: Optional[int] = Field(default=None, ge=0, description="Base ruins count")
    bridge_count: Optional[int] = Field(default=None, ge=0, description="Base bridge count")
    dark_sanctum_count: Optional[int] = Field(
        default=None, ge=0, description="Base dark sanctum count"
    )
    mountain_range_count: Optional[int] = Field(
        default=None, ge=0, description="Mountains spread over internal ranges"
    )
    water_feature_count: Optional[int] = Field(
        default=None, ge=0, description="Water features for the boundary pass"
    )
    special_feature_count: Optional[int] = Field(
        default=None, ge=0, description="Theme-specific special features"
    )

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "ThemeFeatures":
        """Return a new record with overrides applied (camelCase or snake_case keys)."""
        if not overrides:
            return self
        patch = ThemeFeatures.model_validate(overrides).model_dump(exclude_unset=True)
        return ThemeFeatures.model_validate({**self.model_dump(exclude_none=True), **patch})


class Theme(BaseModel):
    """Immutable named bundle of colour palette and feature parameters."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    key: str = Field(description="Registry key, e.g. DARK_FOREST")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="Short description")
    primary_zone: str = Field(description="Zone type dominating this theme")
    color_palette: Dict[str, str] = Field(
        default_factory=dict, description="Colour per palette role"
    )
    features: ThemeFeatures = Field(default_factory=ThemeFeatures)

    def with_features(self, overrides: Optional[Mapping[str, Any]]) -> "Theme":
        """Derive a theme with partial feature overrides."""
        if not overrides:
            return self
        return self.model_copy(update={"features": self.features.merged(overrides)})

    def color(self, *roles: str) -> Optional[str]:
        """First palette colour found among the given roles."""
        for role in roles:
            value = self.color_palette.get(role)
            if value:
                return value
        return None


def _theme(key: str, **kwargs: Any) -> Theme:
    return Theme(key=key, **kwargs)


MAP_THEMES: Mapping[str, Theme] = MappingProxyType(
    {
        "DARK_FOREST": _theme(
            "DARK_FOREST",
            name="Dark Forest",
            description="Dense forest with winding paths, hidden villages, and ancient towers",
            primary_zone="Forest",
            color_palette=dict(ZONE_COLORS["Forest"]),
            features=ThemeFeatures(
                tree_density=0.8,
                path_width=2,
                village_count=3,
                tower_count=5,
                ruins_count=2,
                bridge_count=4,
            ),
        ),
        "FROZEN_MOUNTAINS": _theme(
            "FROZEN_MOUNTAINS",
            name="Frozen Mountains",
            description="Icy peaks with mountain villages, watchtowers, and treacherous paths",
            primary_zone="Mountains",
            color_palette=dict(ZONE_COLORS["Mountains"]),
            features=ThemeFeatures(
                mountain_density=0.9,
                path_width=3,
                village_count=2,
                tower_count=8,
                ruins_count=1,
                bridge_count=6,
            ),
        ),
        "LAVA_ZONE": _theme(
            "LAVA_ZONE",
            name="Lava Zone",
            description="Volcanic landscape with lava flows, dark sanctums, and fire-resistant structures",
            primary_zone="Desert",
            color_palette=dict(HOT_ZONE_COLORS),
            features=ThemeFeatures(
                lava_density=0.6,
                path_width=4,
                village_count=1,
                tower_count=3,
                dark_sanctum_count=4,
                bridge_count=2,
            ),
        ),
        "MYSTICAL_SWAMP": _theme(
            "MYSTICAL_SWAMP",
            name="Mystical Swamp",
            description="Mysterious wetlands with floating bridges, ancient ruins, and hidden paths",
            primary_zone="Swamp",
            color_palette=dict(ZONE_COLORS["Swamp"]),
            features=ThemeFeatures(
                water_density=0.7,
                path_width=2.5,
                village_count=2,
                tower_count=4,
                ruins_count=6,
                bridge_count=8,
            ),
        ),
        "ANCIENT_RUINS": _theme(
            "ANCIENT_RUINS",
            name="Ancient Ruins",
            description="Vast archaeological site with connected ruins, overgrown paths, and forgotten towers",
            primary_zone="Ruins",
            color_palette=dict(ZONE_COLORS["Ruins"]),
            features=ThemeFeatures(
                ruins_density=0.8,
                path_width=3,
                village_count=1,
                tower_count=6,
                ruins_count=12,
                bridge_count=3,
            ),
        ),
    }
)


def normalize_theme_key(name: str) -> str:
    """Normalize a user-supplied theme name to a registry key."""
    return "_".join(name.strip().upper().replace("-", " ").split())


def get_theme(name: str) -> Theme:
    """
    Look up a theme by name.

    Args:
        name: Registry key or display name, in any case

    Returns:
        The registered Theme

    Raises:
        UnknownThemeError: If no theme matches
    """
    theme = MAP_THEMES.get(normalize_theme_key(name))
    if theme is None:
        raise UnknownThemeError(name, MAP_THEMES.keys())
    return theme


def list_themes() -> list:
    """Registry keys in catalog order."""
    return list(MAP_THEMES.keys())


def resolve_zone_color(zone_type: str, theme: Optional[Theme] = None) -> str:
    """
    Resolve the ground colour of a zone.

    The fallback chain is: the theme's own palette (when the zone is the
    theme's primary zone), then the generic zone table, then default gray.
    """
    if theme is not None and zone_type == theme.primary_zone:
        color = theme.color(*THEME_GROUND_ROLES)
        if color:
            return color

    generic = ZONE_COLORS.get(zone_type)
    if generic is not None:
        for role in GENERIC_GROUND_ROLES:
            if generic.get(role):
                return generic[role]

    return DEFAULT_ZONE_COLOR


def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """Convert hex color to RGB values (0-1 range)."""
    if hex_color.startswith("#"):
        hex_color = hex_color[1:]

    r = int(hex_color[0:2], 16) / 255.0
    g = int(hex_color[2:4], 16) / 255.0
    b = int(hex_color[4:6], 16) / 255.0

    return r, g, b


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Convert RGB values (0-1 range) to hex color."""
    r = max(0, min(255, int(round(r * 255))))
    g = max(0, min(255, int(round(g * 255))))
    b = max(0, min(255, int(round(b * 255))))

    return f"#{r:02X}{g:02X}{b:02X}"


def mix_colors(color1: str, color2: str, ratio: float) -> str:
    """
    Mix two colors in HSV space.

    Args:
        color1: Base color
        color2: Mixin color
        ratio: Share of the mixin color (0-1)
    """
    h1, s1, v1 = colorsys.rgb_to_hsv(*hex_to_rgb(color1))
    h2, s2, v2 = colorsys.rgb_to_hsv(*hex_to_rgb(color2))

    # Take the shorter path around the colour wheel
    if abs(h1 - h2) > 0.5:
        if h1 > h2:
            h2 += 1.0
        else:
            h1 += 1.0

    hue = (h1 * (1 - ratio) + h2 * ratio) % 1.0
    saturation = s1 * (1 - ratio) + s2 * ratio
    value = v1 * (1 - ratio) + v2 * ratio

    return rgb_to_hex(*colorsys.hsv_to_rgb(hue, saturation, value))


def mix_themes(
    base: Theme,
    mixin: Theme,
    ratio: float,
    name: Optional[str] = None,
    description: Optional[str] = None,
    features: Optional[Mapping[str, Any]] = None,
) -> Theme:
    """
    Build a new theme by mixing two base themes.

    Numeric features are interpolated by ratio (counts rounded), palette roles
    present in both themes are mixed, roles present in only one are kept.

    Args:
        base: Dominant theme
        mixin: Theme mixed in
        ratio: Share of the mixin theme (0-1)
        name: Display name of the mixed theme
        description: Description of the mixed theme
        features: Explicit feature overrides applied after mixing
    """
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"Mix ratio must be within [0, 1], got {ratio}")

    base_features = base.features.model_dump()
    mixin_features = mixin.features.model_dump()
    mixed: Dict[str, Any] = {}
    for field_name, base_value in base_features.items():
        mixin_value = mixin_features.get(field_name)
        if base_value is None and mixin_value is None:
            continue
        if base_value is None:
            value = mixin_value * ratio
        elif mixin_value is None:
            value = base_value * (1 - ratio)
        else:
            value = base_value * (1 - ratio) + mixin_value * ratio
        if field_name in _INTEGER_FEATURES:
            value = int(round(value))
        elif field_name == "path_width" and value <= 0:
            continue
        mixed[field_name] = value

    palette = dict(base.color_palette)
    for role, color in mixin.color_palette.items():
        palette[role] = mix_colors(palette[role], color, ratio) if role in palette else color

    key = normalize_theme_key(name) if name else f"{base.key}_{mixin.key}"
    theme = Theme(
        key=key,
        name=name or f"{base.name} / {mixin.name}",
        description=description or f"{base.description} mixed with {mixin.name.lower()}",
        primary_zone=base.primary_zone if ratio <= 0.5 else mixin.primary_zone,
        color_palette=palette,
        features=ThemeFeatures.model_validate(mixed),
    )
    return theme.with_features(features)


def random_theme(
    rng,
    name: str,
    description: str = "",
    base: Optional[Theme] = None,
) -> Theme:
    """
    Generate a theme with a random palette keyed off a base hue.

    Args:
        rng: SeededRandom stream
        name: Display name of the theme
        description: Description of the theme
        base: Optional theme to take the primary zone from

    Returns:
        New Theme with the same field shape as registered themes
    """
    base_hue = rng.random()
    palette = {}
    for role, (offset, saturation, value) in _RANDOM_PALETTE_ROLES.items():
        hue = (base_hue + offset + (rng.random() - 0.5) * 0.05) % 1.0
        palette[role] = rgb_to_hex(*colorsys.hsv_to_rgb(hue, saturation, value))

    features = ThemeFeatures(
        tree_density=rng.random() * 1.5,
        mountain_density=rng.random() * 1.2,
        water_density=rng.random() * 0.8,
        lava_density=rng.random() * 0.5,
        path_width=2 + rng.random() * 3,
        village_count=int(rng.random() * 8),
        tower_count=int(rng.random() * 10),
        ruins_count=int(rng.random() * 15),
        bridge_count=int(rng.random() * 12),
        dark_sanctum_count=int(rng.random() * 5),
    )

    primary_zone = base.primary_zone if base is not None else rng.choice(ZONE_TYPES[:5])

    return Theme(
        key=normalize_theme_key(name),
        name=name,
        description=description or f"A unique {name.lower()}",
        primary_zone=primary_zone,
        color_palette=palette,
        features=features,
    )
