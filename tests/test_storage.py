"""
Tests for map storage, the index manifest and minimap output.
"""

import json

import matplotlib.pyplot as plt
import numpy as np
import pytest

from py_worldgen.core.generator import WorldGenerator
from py_worldgen.core.minimap import (
    CELL_KINDS,
    PATH,
    STRUCTURE,
    MinimapGenerator,
    MinimapOptions,
)
from py_worldgen.storage import MapIndexEntry, MapStore

GENERATED_AT = "2024-06-01T12:00:00+00:00"


@pytest.fixture(scope="module")
def document():
    return WorldGenerator(seed=4321, map_size=200).generate("ANCIENT_RUINS", generated_at=GENERATED_AT)


class TestMapStore:
    """Test saving documents and maintaining the index."""

    def test_save_and_load(self, tmp_path, document):
        store = MapStore(tmp_path)
        path = store.save_document(document, "ruins")
        assert path == tmp_path / "ruins.json"
        assert store.load_document("ruins.json").to_dict() == document.to_dict()

    def test_saved_file_is_camel_case_json(self, tmp_path, document):
        store = MapStore(tmp_path)
        path = store.save_document(document, "ruins.json")
        data = json.loads(path.read_text())
        assert data["metadata"]["generatedAt"] == GENERATED_AT
        assert data["metadata"]["themeKey"] == "ANCIENT_RUINS"

    def test_missing_document(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MapStore(tmp_path).load_document("nothing")

    def test_empty_index(self, tmp_path):
        index = MapStore(tmp_path).load_index()
        assert index.maps == []
        assert not (tmp_path / "index.json").exists()

    def test_publish_without_minimap(self, tmp_path, document):
        store = MapStore(tmp_path)
        entry = store.publish(document, "ancient_ruins", minimap=False)

        assert entry.filename == "ancient_ruins.json"
        assert entry.name == "Ancient Ruins"
        assert entry.seed == 4321
        assert entry.map_size == 200
        assert entry.stats == document.stats()
        assert entry.minimap is None
        assert entry.preview is None
        assert (tmp_path / "ancient_ruins.json").exists()

        index = json.loads((tmp_path / "index.json").read_text())
        assert [m["id"] for m in index["maps"]] == ["ancient_ruins"]
        assert index["maps"][0]["mapSize"] == 200
        assert "generated" in index

    def test_publish_replaces_entry_with_same_id(self, tmp_path, document):
        store = MapStore(tmp_path)
        store.publish(document, "first", minimap=False)
        store.publish(document, "second", minimap=False)
        store.publish(document, "first", minimap=False, name="Renamed")

        maps = store.load_index().maps
        assert [m.id for m in maps] == ["first", "second"]
        assert maps[0].name == "Renamed"

    def test_update_index_replace(self, tmp_path, document):
        store = MapStore(tmp_path)
        store.publish(document, "old", minimap=False)
        entry = MapStore.index_entry(document, "new", "new.json")
        index = store.update_index([entry], replace=True)
        assert [m.id for m in index.maps] == ["new"]

    def test_find_entry(self, tmp_path, document):
        store = MapStore(tmp_path)
        store.publish(document, "found", filename="custom_name.json", minimap=False)
        entry = store.find_entry("found")
        assert isinstance(entry, MapIndexEntry)
        assert entry.filename == "custom_name.json"
        assert store.find_entry("lost") is None

    def test_separate_index_file(self, tmp_path, document):
        store = MapStore(tmp_path, "random_themes_index.json")
        store.publish(document, "random", minimap=False)
        assert (tmp_path / "random_themes_index.json").exists()
        assert not (tmp_path / "index.json").exists()

    def test_publish_with_minimap(self, tmp_path, document):
        store = MapStore(tmp_path)
        options = MinimapOptions(resolution=16, image_resolutions=[32, 64])
        entry = store.publish(document, "with_minimap", minimap_options=options)

        assert entry.minimap.data == "minimaps/with_minimap_minimap.json"
        assert entry.minimap.images == [
            "minimaps/with_minimap_32x32.png",
            "minimaps/with_minimap_64x64.png",
        ]
        assert entry.preview == "minimaps/with_minimap_64x64.png"
        for relative in [entry.minimap.data, *entry.minimap.images]:
            assert (tmp_path / relative).exists()


class TestMinimap:
    """Test minimap grid derivation and rendering."""

    def setup_method(self):
        self.options = MinimapOptions(resolution=20, image_resolutions=[40])

    def test_grid_layout(self, document):
        data = MinimapGenerator(document, self.options).to_dict()
        assert data["gridSize"] == 20
        assert data["mapSize"] == 200
        assert data["legend"]["cells"] == list(CELL_KINDS)
        for layer in ("cells", "zoneIndex", "terrain", "density"):
            assert len(data[layer]) == 20
            assert all(len(row) == 20 for row in data[layer])

    def test_every_cell_has_a_zone(self, document):
        data = MinimapGenerator(document, self.options).to_dict()
        zone_count = len(data["zones"])
        # Boundary zone has no centre and is skipped
        assert zone_count == len(document.zones) - 1
        for row in data["zoneIndex"]:
            assert all(0 <= z < zone_count for z in row)

    def test_structures_and_paths_drawn(self, document):
        generator = MinimapGenerator(document, self.options).build()
        kinds = generator.kinds
        assert (kinds == PATH).any()
        for entry in generator.structures:
            x, y = entry["position"]["x"], entry["position"]["y"]
            assert kinds[y, x] in (STRUCTURE, PATH)

    def test_density_in_unit_range(self, document):
        generator = MinimapGenerator(document, self.options).build()
        assert generator.density.min() >= 0
        assert generator.density.max() <= 1

    def test_render(self, document):
        image = MinimapGenerator(document, self.options).render()
        assert image.shape == (20, 20, 3)
        assert np.all((image >= 0) & (image <= 1))

    def test_generate_files(self, tmp_path, document):
        result = MinimapGenerator(document, self.options).generate(tmp_path, "ruins")
        assert result == {"data": "ruins_minimap.json", "images": ["ruins_40x40.png"]}
        assert (tmp_path / "ruins_40x40.png").read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

        data = json.loads((tmp_path / "ruins_minimap.json").read_text())
        assert data["images"] == ["ruins_40x40.png"]

    def test_failed_save_closes_figure(self, tmp_path, document):
        plt.close("all")
        generator = MinimapGenerator(document, self.options).build()
        with pytest.raises(FileNotFoundError):
            generator.save_image(tmp_path / "missing" / "map.png", 40)
        assert plt.get_fignums() == []

    def test_resolution_lower_bound(self):
        with pytest.raises(ValueError):
            MinimapOptions(resolution=2)
