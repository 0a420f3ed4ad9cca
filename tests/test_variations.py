"""
Tests for preset map variations and theme combinations.
"""

import pytest

from py_worldgen.config.themes import MAP_THEMES, get_theme
from py_worldgen.config.variations import (
    DARK_FOREST_TREE_CAP,
    MAP_VARIATIONS,
    THEME_COMBINATIONS,
    VARIATIONS_BY_NAME,
    apply_variation,
)
from py_worldgen.core.generator import WorldGenerator
from py_worldgen.core.seeded_prng import SeededRandom


class TestMapVariations:
    """Test variation overrides on registered themes."""

    def test_variation_table(self):
        names = [variation.name for variation in MAP_VARIATIONS]
        assert len(names) == 15
        assert names[0] == "Dense"
        assert names[-1] == "Peaceful"
        assert len(set(names)) == len(names)

    def test_camel_case_overrides_replace_theme_counts(self):
        theme = apply_variation(get_theme("FROZEN_MOUNTAINS"), VARIATIONS_BY_NAME["Dense"], SeededRandom(1))
        assert theme.features.village_count == 5
        assert theme.features.tower_count == 8
        assert theme.features.tree_density == 1.2
        assert theme.features.mountain_density == 0.9
        assert MAP_THEMES["FROZEN_MOUNTAINS"].features.village_count == 2

    def test_dark_forest_density_capped(self):
        theme = apply_variation(get_theme("DARK_FOREST"), VARIATIONS_BY_NAME["Ruined"], SeededRandom(1))
        assert theme.features.tree_density == pytest.approx(DARK_FOREST_TREE_CAP)
        assert theme.features.village_count == 0
        assert theme.features.ruins_count == 15

    def test_variation_density_wins_over_cap(self):
        theme = apply_variation(get_theme("DARK_FOREST"), VARIATIONS_BY_NAME["Sparse"], SeededRandom(1))
        assert theme.features.tree_density == 0.4

    def test_chaotic_counts_drawn_from_rng(self):
        chaotic = VARIATIONS_BY_NAME["Chaotic"]
        first = chaotic.resolve(SeededRandom(9))
        second = chaotic.resolve(SeededRandom(9))
        assert first == second
        assert first["pathWidth"] == 5
        assert 0 <= first["villageCount"] < 10
        assert 0 <= first["towerCount"] < 15

    @pytest.mark.parametrize("variation", MAP_VARIATIONS, ids=lambda v: v.name)
    def test_every_variation_applies(self, variation):
        for key in MAP_THEMES:
            apply_variation(get_theme(key), variation, SeededRandom(3))


class TestThemeCombinations:
    """Test named mixes of registered themes."""

    def test_every_combination_builds(self):
        keys = [combination.build().key for combination in THEME_COMBINATIONS]
        assert keys == [
            "VOLCANIC_FOREST",
            "FROZEN_RUINS",
            "SWAMP_SANCTUM",
            "MOUNTAIN_FOREST",
            "RUINED_DESERT",
        ]

    def test_volcanic_forest(self):
        theme = THEME_COMBINATIONS[0].build()
        assert theme.name == "Volcanic Forest"
        assert theme.primary_zone == "Forest"
        assert theme.features.tree_density == 0.6
        assert theme.features.lava_density == 0.5
        assert theme.features.dark_sanctum_count == 2

    def test_combination_overrides_apply_after_cap(self):
        theme = THEME_COMBINATIONS[3].build()
        assert theme.features.tree_density == 1.0
        assert theme.features.village_count == 4

    def test_frozen_ruins_follows_mixin_zone(self):
        theme = THEME_COMBINATIONS[1].build()
        assert theme.primary_zone == "Mountains"
        assert theme.features.ruins_density == 0.7
        assert theme.features.bridge_count == 10

    def test_combination_generates(self):
        document = WorldGenerator(seed=6, map_size=150).generate(THEME_COMBINATIONS[2].build())
        assert document.metadata.theme_key == "SWAMP_SANCTUM"
        assert document.count_by_type("structures")["darkSanctum"] == 14
