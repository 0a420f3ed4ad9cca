"""
Tests for tree compaction and the world document model.
"""

import math

import pytest
from pydantic import ValidationError

from py_worldgen.config.themes import get_theme
from py_worldgen.core.compaction import CompactionOptions, TreeCompactor, compact_trees
from py_worldgen.core.models import (
    EnvironmentObject,
    Metadata,
    Path,
    Tower,
    Vec3,
    WorldDocument,
)


def _object(type, x, z, size=None):
    return EnvironmentObject(type=type, position=Vec3(x=x, z=z), theme="Dark Forest", size=size)


def _document(environment, structures=None, paths=None):
    return WorldDocument(
        theme=get_theme("DARK_FOREST"),
        structures=structures or [],
        paths=paths or [],
        environment=environment,
        metadata=Metadata(
            seed=1, size=100, generated_at="2024-01-01T00:00:00+00:00", theme_key="DARK_FOREST"
        ),
    )


class TestTreeCompactor:
    """Test grid batching of trees."""

    def setup_method(self):
        self.document = _document(
            [
                _object("tree", 1, 1, size=1.0),
                _object("rock", 5, 5, size=0.5),
                _object("tree", 2, 2, size=2.0),
                _object("tree", 50, 50, size=1.5),
                _object("tree", 3, 3, size=3.0),
            ]
        )
        self.compacted = TreeCompactor(CompactionOptions(cell_size=20)).compact(self.document)

    def test_cluster_replaces_first_tree(self):
        environment = self.compacted.environment
        assert [obj.type for obj in environment] == ["tree_cluster", "rock", "tree"]

    def test_cluster_aggregates(self):
        cluster = self.compacted.environment[0]
        assert cluster.tree_count == 3
        assert cluster.position.x == pytest.approx(2.0)
        assert cluster.position.z == pytest.approx(2.0)
        assert cluster.avg_size == pytest.approx(2.0)
        assert cluster.radius == pytest.approx(math.sqrt(2))
        assert cluster.theme == "Dark Forest"

    def test_cluster_members_relative(self):
        cluster = self.compacted.environment[0]
        assert len(cluster.trees) == 3
        first = cluster.trees[0]
        assert first.relative_position.x == pytest.approx(-1.0)
        assert first.relative_position.z == pytest.approx(-1.0)
        assert first.size == 1.0

    def test_non_trees_untouched(self):
        assert self.compacted.environment[1] == self.document.environment[1]
        assert self.compacted.environment[2] == self.document.environment[3]

    def test_stats(self):
        stats = self.compacted.metadata.compaction
        assert stats.original_tree_count == 4
        assert stats.cluster_count == 1
        assert stats.singleton_count == 1
        assert stats.output_tree_records == 2
        assert stats.compression_ratio == 2.0
        assert stats.cell_size == 20

    def test_tree_count_conserved(self):
        total = 0
        for obj in self.compacted.environment:
            if obj.type == "tree":
                total += 1
            elif obj.type == "tree_cluster":
                total += obj.tree_count
        assert total == 4

    def test_input_document_unchanged(self):
        assert [obj.type for obj in self.document.environment].count("tree") == 4
        assert self.document.metadata.compaction is None

    def test_idempotent(self):
        again = TreeCompactor(CompactionOptions(cell_size=20)).compact(self.compacted)
        assert again.environment == self.compacted.environment

    def test_no_trees_records_unit_ratio(self):
        document = _document([_object("rock", 0, 0)])
        compacted = TreeCompactor().compact(document)
        assert compacted.environment == document.environment
        stats = compacted.metadata.compaction
        assert stats.original_tree_count == 0
        assert stats.output_tree_records == 0
        assert stats.compression_ratio == 1.0
        assert document.metadata.compaction is None

    def test_no_trees_already_compacted_returns_same_document(self):
        compacted = TreeCompactor().compact(_document([_object("rock", 0, 0)]))
        assert TreeCompactor().compact(compacted) is compacted

    def test_negative_coordinates_use_floor_cells(self):
        document = _document([_object("tree", -1, -1), _object("tree", 1, 1)])
        compacted = compact_trees(document, cell_size=20)
        assert [obj.type for obj in compacted.environment] == ["tree", "tree"]

    def test_missing_size_counts_as_one(self):
        document = _document([_object("tree", 1, 1), _object("tree", 2, 1, size=3.0)])
        cluster = compact_trees(document).environment[0]
        assert cluster.avg_size == pytest.approx(2.0)

    def test_without_members(self):
        compacted = compact_trees(self.document, cell_size=20, keep_members=False)
        assert compacted.environment[0].trees is None
        assert "trees" not in compacted.environment[0].to_dict()

    def test_cell_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            CompactionOptions(cell_size=0)


class TestWorldDocument:
    """Test document validation and serialization."""

    def test_connects_out_of_range(self):
        tower = Tower(id="tower_0", position=Vec3(), theme="Dark Forest", height=20, radius=4)
        path = Path(
            id="connection_0_1",
            points=[Vec3(), Vec3(x=10)],
            width=1,
            type="connection",
            connects=(0, 1),
        )
        with pytest.raises(ValidationError):
            _document([], structures=[tower], paths=[path])

    def test_path_needs_two_points(self):
        with pytest.raises(ValidationError):
            Path(id="p", points=[Vec3()], width=1)

    def test_camel_case_output(self):
        data = _document([_object("tree", 1, 1)]).to_dict()
        assert data["metadata"]["generatedAt"] == "2024-01-01T00:00:00+00:00"
        assert data["metadata"]["themeKey"] == "DARK_FOREST"
        assert "compaction" not in data["metadata"]
        assert data["theme"]["colorPalette"]["foliage"] == "#1E5631"

    def test_json_round_trip(self):
        document = _document([_object("tree", 1, 1, size=1.0), _object("rock", 3, 4)])
        restored = WorldDocument.from_json(document.to_json())
        assert restored.to_dict() == document.to_dict()

    def test_stats_and_histogram(self):
        document = _document([_object("tree", 1, 1), _object("tree", 2, 2), _object("rock", 3, 3)])
        assert document.stats() == {"zones": 0, "structures": 0, "paths": 0, "environment": 3}
        assert document.count_by_type("environment") == {"tree": 2, "rock": 1}
