"""
Unit tests for the theme registry and derived themes.

Tests cover:
- Registry lookup and key normalization
- Feature overrides
- Zone colour resolution
- Theme mixing and random themes
"""

import pytest
from pydantic import ValidationError

from py_worldgen.config.themes import (
    DEFAULT_ZONE_COLOR,
    MAP_THEMES,
    Theme,
    ThemeFeatures,
    get_theme,
    hex_to_rgb,
    list_themes,
    mix_colors,
    mix_themes,
    normalize_theme_key,
    random_theme,
    resolve_zone_color,
    rgb_to_hex,
)
from py_worldgen.core.seeded_prng import SeededRandom
from py_worldgen.errors import ConfigurationError, UnknownThemeError


class TestThemeRegistry:
    """Test theme lookup."""

    def test_registered_themes(self):
        assert list_themes() == [
            "DARK_FOREST",
            "FROZEN_MOUNTAINS",
            "LAVA_ZONE",
            "MYSTICAL_SWAMP",
            "ANCIENT_RUINS",
        ]

    def test_primary_zones(self):
        assert get_theme("DARK_FOREST").primary_zone == "Forest"
        assert get_theme("FROZEN_MOUNTAINS").primary_zone == "Mountains"
        assert get_theme("LAVA_ZONE").primary_zone == "Desert"
        assert get_theme("MYSTICAL_SWAMP").primary_zone == "Swamp"
        assert get_theme("ANCIENT_RUINS").primary_zone == "Ruins"

    @pytest.mark.parametrize("name", ["DARK_FOREST", "dark_forest", "Dark Forest", "dark-forest"])
    def test_lookup_is_case_insensitive(self, name):
        assert get_theme(name) is MAP_THEMES["DARK_FOREST"]

    def test_normalize_theme_key(self):
        assert normalize_theme_key("  mystical   swamp ") == "MYSTICAL_SWAMP"

    def test_unknown_theme(self):
        with pytest.raises(UnknownThemeError) as exc_info:
            get_theme("NOT_A_THEME")
        error = exc_info.value
        assert error.name == "NOT_A_THEME"
        assert error.available == list_themes()
        assert "Available themes" in str(error)

    def test_unknown_theme_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            get_theme("nowhere")

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            MAP_THEMES["NEW"] = MAP_THEMES["DARK_FOREST"]

    def test_themes_are_frozen(self):
        theme = get_theme("LAVA_ZONE")
        with pytest.raises(ValidationError):
            theme.name = "Changed"


class TestThemeFeatures:
    """Test feature records and overrides."""

    def test_dark_forest_features(self):
        features = get_theme("DARK_FOREST").features
        assert features.tree_density == 0.8
        assert features.path_width == 2
        assert features.village_count == 3
        assert features.tower_count == 5
        assert features.ruins_count == 2
        assert features.bridge_count == 4
        assert features.dark_sanctum_count is None

    def test_with_features_returns_new_theme(self):
        base = get_theme("DARK_FOREST")
        derived = base.with_features({"tree_density": 0.2})
        assert derived.features.tree_density == 0.2
        assert derived.features.village_count == 3
        assert base.features.tree_density == 0.8
        assert MAP_THEMES["DARK_FOREST"].features.tree_density == 0.8

    def test_with_features_accepts_camel_case(self):
        derived = get_theme("DARK_FOREST").with_features({"villageCount": 0})
        assert derived.features.village_count == 0

    def test_camel_case_override_of_set_feature(self):
        base = get_theme("DARK_FOREST")
        derived = base.with_features({"villageCount": 5, "treeDensity": 0.3})
        assert derived.features.village_count == 5
        assert derived.features.tree_density == 0.3
        assert derived.features.tower_count == base.features.tower_count

    def test_mixed_case_overrides(self):
        derived = get_theme("LAVA_ZONE").with_features({"towerCount": 1, "bridge_count": 2})
        assert derived.features.tower_count == 1
        assert derived.features.bridge_count == 2

    def test_empty_overrides_return_same_theme(self):
        base = get_theme("DARK_FOREST")
        assert base.with_features(None) is base
        assert base.with_features({}) is base

    def test_unknown_feature_rejected(self):
        with pytest.raises(ValidationError):
            get_theme("DARK_FOREST").with_features({"dragonCount": 3})

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            ThemeFeatures(village_count=-1)

    def test_serializes_camel_case(self):
        data = get_theme("DARK_FOREST").model_dump(by_alias=True, exclude_none=True)
        assert data["primaryZone"] == "Forest"
        assert data["features"]["treeDensity"] == 0.8
        assert "colorPalette" in data


class TestZoneColors:
    """Test zone colour fallback chain."""

    def test_primary_zone_uses_theme_palette(self):
        theme = get_theme("DARK_FOREST")
        assert resolve_zone_color("Forest", theme) == theme.color_palette["ground"]

    def test_generic_zone_table(self):
        assert resolve_zone_color("Desert") == "#E9BE62"

    def test_unknown_zone_falls_back_to_gray(self):
        assert resolve_zone_color("Moon") == DEFAULT_ZONE_COLOR


class TestThemeMixing:
    """Test mixing two themes."""

    def test_mix_colors_midpoint(self):
        assert mix_colors("#000000", "#FFFFFF", 0.5) == "#808080"

    def test_mix_colors_endpoints(self):
        assert mix_colors("#000000", "#FFFFFF", 0.0) == "#000000"
        assert mix_colors("#000000", "#FFFFFF", 1.0) == "#FFFFFF"

    def test_hex_conversions(self):
        assert hex_to_rgb("#FF8000") == (1.0, 128 / 255, 0.0)
        assert hex_to_rgb("00FF00") == (0.0, 1.0, 0.0)
        assert rgb_to_hex(1.0, 128 / 255, 0.0) == "#FF8000"
        assert rgb_to_hex(1.5, -0.2, 0.0) == "#FF0000"

    def test_mix_themes_interpolates_features(self):
        base = get_theme("DARK_FOREST")
        mixin = get_theme("FROZEN_MOUNTAINS")
        mixed = mix_themes(base, mixin, 0.5)

        assert mixed.features.tree_density == pytest.approx(0.4)
        assert mixed.features.mountain_density == pytest.approx(0.45)
        assert mixed.features.path_width == pytest.approx(2.5)
        assert isinstance(mixed.features.tower_count, int)
        assert mixed.key == "DARK_FOREST_FROZEN_MOUNTAINS"
        assert mixed.primary_zone == "Forest"

    def test_mix_themes_primary_zone_follows_ratio(self):
        mixed = mix_themes(get_theme("DARK_FOREST"), get_theme("MYSTICAL_SWAMP"), 0.8)
        assert mixed.primary_zone == "Swamp"

    def test_mix_themes_custom_name(self):
        mixed = mix_themes(
            get_theme("LAVA_ZONE"), get_theme("ANCIENT_RUINS"), 0.3, name="Ash Ruins"
        )
        assert mixed.name == "Ash Ruins"
        assert mixed.key == "ASH_RUINS"

    def test_mix_themes_keeps_registry_untouched(self):
        mix_themes(get_theme("DARK_FOREST"), get_theme("LAVA_ZONE"), 0.5)
        assert "DARK_FOREST_LAVA_ZONE" not in MAP_THEMES

    @pytest.mark.parametrize("ratio", [-0.1, 1.5])
    def test_mix_ratio_out_of_range(self, ratio):
        with pytest.raises(ValueError):
            mix_themes(get_theme("DARK_FOREST"), get_theme("LAVA_ZONE"), ratio)


class TestRandomTheme:
    """Test generated themes."""

    def test_random_theme_shape(self):
        theme = random_theme(SeededRandom(11), "Mystic Peaks", "A test theme")
        assert isinstance(theme, Theme)
        assert theme.key == "MYSTIC_PEAKS"
        assert theme.description == "A test theme"
        for role in ("ground", "foliage", "rock", "structure", "accent", "path", "glow"):
            assert theme.color_palette[role].startswith("#")
            assert len(theme.color_palette[role]) == 7

    def test_random_theme_is_deterministic(self):
        a = random_theme(SeededRandom(5), "Arcane Depths")
        b = random_theme(SeededRandom(5), "Arcane Depths")
        assert a == b

    def test_random_theme_base_primary_zone(self):
        theme = random_theme(SeededRandom(5), "Swampy", base=get_theme("MYSTICAL_SWAMP"))
        assert theme.primary_zone == "Swamp"
