"""
Tests for the world builder, zone layout and main road network.
"""

import math

import pytest

from py_worldgen.config.themes import get_theme
from py_worldgen.core.builder import WorldBuilder
from py_worldgen.core.models import PathPattern, Vec3, ZoneRole
from py_worldgen.core.paths import PathNetwork, PathOptions
from py_worldgen.core.seeded_prng import SeededRandom
from py_worldgen.core.zones import ZoneLayout, ZoneOptions

MAIN_PATH_IDS = (
    [f"horizontal_{i}" for i in range(4)]
    + [f"vertical_{i}" for i in range(4)]
    + ["diagonal_1", "diagonal_2", "center_circle_1", "center_circle_2"]
    + [f"random_circle_{i}" for i in range(3)]
    + [f"curved_path_{i}" for i in range(5)]
    + [f"corner_path_{i}" for i in range(4)]
)


class TestWorldBuilder:
    """Test the append-only builder."""

    def test_invalid_map_size(self):
        with pytest.raises(ValueError):
            WorldBuilder(get_theme("DARK_FOREST"), 0)

    def test_boundary_and_scale(self):
        builder = WorldBuilder(get_theme("DARK_FOREST"), 2000)
        assert builder.boundary_size == pytest.approx(1900)
        assert builder.boundary_half_size == pytest.approx(950)
        assert builder.scale == pytest.approx(2.0)

    def test_degenerate_path_skipped(self):
        builder = WorldBuilder(get_theme("DARK_FOREST"), 1000)
        assert builder.add_path("single", [Vec3()], 2) is None
        assert builder.add_path("flat", [Vec3(), Vec3(x=1)], 0) is None
        assert builder.paths == []

    def test_add_path_flattens_points(self):
        builder = WorldBuilder(get_theme("DARK_FOREST"), 1000)
        path = builder.add_path("raised", [Vec3(y=5), Vec3(x=10, y=3)], 2)
        assert [p.y for p in path.points] == [0.0, 0.0]
        assert builder.paths == [path]

    def test_next_id(self):
        builder = WorldBuilder(get_theme("DARK_FOREST"), 1000)
        assert builder.next_id("watchtower") == "watchtower_0"
        assert builder.next_id("watchtower") == "watchtower_1"
        assert builder.next_id("mountain_shrine") == "mountain_shrine_0"

    def test_add_object_tags_theme(self):
        builder = WorldBuilder(get_theme("LAVA_ZONE"), 1000)
        obj = builder.add_object("lava", Vec3(x=1), size=3)
        assert obj.theme == "Lava Zone"
        assert builder.environment == [obj]


class TestZoneLayout:
    """Test zone generation."""

    def setup_method(self):
        self.theme = get_theme("DARK_FOREST")
        self.builder = WorldBuilder(self.theme, 1000)
        self.zones = ZoneLayout(self.builder, SeededRandom(12345)).generate()

    def test_zone_roles_and_ids(self):
        assert self.zones[0].id == "boundary"
        assert self.zones[0].role == ZoneRole.BOUNDARY
        assert self.zones[1].id == "primary"
        assert self.zones[1].role == ZoneRole.PRIMARY

        secondary = [z for z in self.zones if z.role == ZoneRole.SECONDARY]
        assert [z.id for z in secondary] == [f"zone_{i}" for i in range(8)]

        sub = [z for z in self.zones if z.role == ZoneRole.SUB]
        assert 5 <= len(sub) <= 14
        assert [z.id for z in sub] == [f"subzone_{i}" for i in range(len(sub))]

    def test_zones_added_to_builder(self):
        assert self.builder.zones == self.zones

    def test_boundary_square(self):
        boundary = self.zones[0]
        assert boundary.type == "boundary"
        assert boundary.center is None
        assert len(boundary.points) == 4
        for point in boundary.points:
            assert abs(point.x) == pytest.approx(475)
            assert abs(point.z) == pytest.approx(475)

    def test_primary_zone(self):
        primary = self.zones[1]
        assert primary.type == "forest"
        assert primary.name == "Forest"
        assert primary.center == Vec3()
        assert primary.radius == pytest.approx(237.5)
        assert primary.color == self.theme.color_palette["ground"]

    def test_zone_types_lowercase(self):
        for zone in self.zones:
            assert zone.type == zone.type.lower()

    def test_secondary_radius_jitter(self):
        nominal = 475 * 0.6
        for zone in self.zones[2:10]:
            assert nominal * 0.7 <= zone.radius < nominal * 1.3

    def test_sub_zone_bounds(self):
        for zone in self.zones[10:]:
            assert 30 <= zone.radius < 100
            assert math.hypot(zone.center.x, zone.center.z) <= 475 * 0.8

    def test_sub_zone_count_options(self):
        builder = WorldBuilder(self.theme, 1000)
        options = ZoneOptions(min_subzones=2, max_subzones=2)
        zones = ZoneLayout(builder, SeededRandom(1), options).generate()
        assert len(zones) == 12

    def test_zone_options_range(self):
        with pytest.raises(ValueError):
            ZoneOptions(min_subzones=6, max_subzones=3)


@pytest.fixture(scope="module")
def network():
    builder = WorldBuilder(get_theme("DARK_FOREST"), 1000)
    paths = PathNetwork(builder, SeededRandom(12345)).generate()
    return builder, {path.id: path for path in paths}


class TestPathNetwork:
    """Test the main road network."""

    def test_path_ids_in_order(self, network):
        builder, _ = network
        assert [p.id for p in builder.paths] == MAIN_PATH_IDS

    def test_paths_well_formed(self, network):
        builder, _ = network
        for path in builder.paths:
            assert len(path.points) >= 2
            assert path.width > 0
            assert all(p.y == 0.0 for p in path.points)

    def test_theme_path_width(self, network):
        _, paths = network
        assert paths["horizontal_0"].width == 2
        assert paths["corner_path_0"].width == pytest.approx(1.6)

    def test_grid_lines(self, network):
        _, paths = network
        horizontal = paths["horizontal_1"]
        assert len(horizontal.points) == 11
        assert horizontal.points[0].x == pytest.approx(-475)
        assert horizontal.points[-1].x == pytest.approx(475)
        expected_z = -475 + 950 / 3
        for point in horizontal.points:
            assert abs(point.z - expected_z) <= 15

    def test_diagonals_cross_origin(self, network):
        _, paths = network
        for path_id in ("diagonal_1", "diagonal_2"):
            assert len(paths[path_id].points) == 5
            assert paths[path_id].points[2] == Vec3()

    def test_circles(self, network):
        _, paths = network
        for path_id, radius in (("center_circle_1", 142.5), ("center_circle_2", 285.0)):
            circle = paths[path_id]
            assert circle.pattern == PathPattern.CIRCULAR
            assert circle.is_circular
            assert circle.radius == pytest.approx(radius)
            assert len(circle.points) == 17
            assert circle.points[0].x == pytest.approx(circle.points[-1].x)
            assert circle.points[0].z == pytest.approx(circle.points[-1].z)
            for point in circle.points:
                distance = math.hypot(point.x - circle.center.x, point.z - circle.center.z)
                assert distance == pytest.approx(circle.radius)

    def test_random_circles(self, network):
        _, paths = network
        for i in range(3):
            circle = paths[f"random_circle_{i}"]
            assert circle.is_circular
            assert 50 <= circle.radius < 150

    def test_corner_paths(self, network):
        _, paths = network
        corners = [(-475, -475), (475, -475), (475, 475), (-475, 475)]
        for i, (x, z) in enumerate(corners):
            path = paths[f"corner_path_{i}"]
            assert len(path.points) == 9
            assert path.points[0] == Vec3()
            assert path.points[-1].x == pytest.approx(x)
            assert path.points[-1].z == pytest.approx(z)

    def test_curves(self, network):
        _, paths = network
        for i in range(5):
            assert len(paths[f"curved_path_{i}"].points) == 11

    def test_scaled_noise(self):
        """Noise and radii scale with the map, road counts do not."""
        builder = WorldBuilder(get_theme("DARK_FOREST"), 200)
        PathNetwork(builder, SeededRandom(3), PathOptions()).generate()
        assert [p.id for p in builder.paths] == MAIN_PATH_IDS
        for path in builder.paths:
            if path.id.startswith("random_circle"):
                assert 10 <= path.radius < 30
