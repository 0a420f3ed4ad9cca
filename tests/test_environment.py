"""
Tests for environment scatter.

Environment passes are run on a reduced map so the whole stage stays fast.
"""

import pytest

from py_worldgen.config.themes import get_theme
from py_worldgen.core.builder import WorldBuilder
from py_worldgen.core.environment import EnvironmentOptions, EnvironmentScatter
from py_worldgen.core.models import Outpost, Vec3
from py_worldgen.core.paths import PathNetwork
from py_worldgen.core.seeded_prng import SeededRandom
from py_worldgen.core.spatial import is_position_clear
from py_worldgen.core.structures import StructurePlacer

MAP_SIZE = 500


def _scatter(theme_name, seed=12345, options=None):
    builder = WorldBuilder(get_theme(theme_name), MAP_SIZE)
    rng = SeededRandom(seed)
    PathNetwork(builder, rng).generate()
    StructurePlacer(builder, rng).generate()
    core_structures = list(builder.structures)
    core_paths = list(builder.paths)
    objects = EnvironmentScatter(builder, rng, options).generate()
    return builder, objects, core_structures, core_paths


@pytest.fixture(scope="module")
def forest():
    return _scatter("DARK_FOREST")


class TestEnvironmentScatter:
    """Test the environment stage on a forest world."""

    def test_objects_added(self, forest):
        builder, objects, _, _ = forest
        assert objects
        assert builder.environment == objects

    def test_objects_tagged_with_theme(self, forest):
        _, objects, _, _ = forest
        assert all(obj.theme == "Dark Forest" for obj in objects)

    def test_every_object_clear_of_core_world(self, forest):
        """Each object keeps at least the member clearance from roads and structures."""
        _, objects, structures, paths = forest
        for obj in objects:
            assert is_position_clear(obj.position, structures, paths, 2, 1)

    def test_background_objects_keep_background_clearance(self, forest):
        _, objects, structures, paths = forest
        background = [obj for obj in objects if obj.background]
        assert background
        for obj in background:
            assert is_position_clear(obj.position, structures, paths, 8, 5, background=True)

    def test_forest_has_trees(self, forest):
        _, objects, _, _ = forest
        trees = [obj for obj in objects if obj.type == "tree"]
        assert trees

    def test_cluster_names(self, forest):
        _, objects, _, _ = forest
        prefixes = (
            "forest_",
            "rock_formation_",
            "bush_thicket_",
            "flower_patch_",
            "mountain_range_",
        )
        for obj in objects:
            if obj.cluster is not None:
                assert obj.cluster.startswith(prefixes)

    def test_scattered_objects_carry_variant(self, forest):
        _, objects, _, _ = forest
        scattered = [obj for obj in objects if obj.scattered]
        assert scattered
        assert all(obj.variant is not None for obj in scattered)

    def test_flower_patches_record_flower_type(self, forest):
        _, objects, _, _ = forest
        for obj in objects:
            if obj.cluster and obj.cluster.startswith("flower_patch_") and obj.type == "flower":
                assert obj.flower_type is not None

    def test_outposts_are_structures(self, forest):
        builder, _, structures, _ = forest
        outposts = builder.structures[len(structures):]
        for outpost in outposts:
            assert isinstance(outpost, Outpost)
            assert outpost.type in ("watchtower", "mountain_shrine")
            assert outpost.id.startswith(outpost.type)

    def test_deterministic(self, forest):
        _, objects, _, _ = forest
        _, again, _, _ = _scatter("DARK_FOREST")
        assert [obj.to_dict() for obj in objects] == [obj.to_dict() for obj in again]


class TestThemeEnvironments:
    """Test theme-specific environment passes."""

    def test_no_tree_density_means_no_forest(self):
        _, objects, _, _ = _scatter("FROZEN_MOUNTAINS")
        assert not any(obj.cluster and obj.cluster.startswith("forest_") for obj in objects)
        assert any(obj.type == "mountain" for obj in objects)

    def test_lava_theme_has_glowing_lava(self):
        _, objects, _, _ = _scatter("LAVA_ZONE")
        lava = [obj for obj in objects if obj.type == "lava"]
        assert lava
        assert all(obj.glowing for obj in lava)

    def test_swamp_has_water(self):
        _, objects, _, _ = _scatter("MYSTICAL_SWAMP")
        assert any(obj.type == "water" for obj in objects)

    def test_disabled_budgets(self):
        options = EnvironmentOptions(
            rock_count=0,
            bush_count=0,
            flower_count=0,
            boundary_mountains=0,
            default_mountain_count=0,
            default_water_count=0,
            default_special_count=0,
            scatter_factor=0,
        )
        _, objects, _, _ = _scatter("ANCIENT_RUINS", options=options)
        assert objects
        assert all(obj.background for obj in objects)


class TestBackgroundObjectType:
    """Test background kind selection."""

    def test_zero_tree_density_never_picks_tree(self):
        builder = WorldBuilder(get_theme("ANCIENT_RUINS"), MAP_SIZE)
        scatter = EnvironmentScatter(builder, SeededRandom(8))
        kinds = {scatter.background_object_type(50, 250) for _ in range(500)}
        assert "tree" not in kinds
        assert kinds <= {"rock", "bush", "flower", "tall_grass"}

    def test_place_enforces_member_clearance(self):
        builder = WorldBuilder(get_theme("DARK_FOREST"), MAP_SIZE)
        builder.add_path("road", [Vec3(x=-50), Vec3(x=50)], 2)
        scatter = EnvironmentScatter(builder, SeededRandom(8))
        assert scatter._place("rock", Vec3(z=2.5), min_structures=0, min_paths=0) is None
        assert scatter._place("rock", Vec3(z=3.5), min_structures=0, min_paths=0) is not None
