"""
Flat-file storage of generated worlds and the ``index.json`` manifest.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog
from pydantic import Field

from ..config.config import settings
from ..core.models import WorldDocument, WorldModel

logger = structlog.get_logger()


class MinimapReference(WorldModel):
    data: str
    images: List[str] = Field(default_factory=list)


class MapIndexEntry(WorldModel):
    """Manifest entry summarizing one generated map."""

    id: str
    name: str
    description: str = ""
    filename: str
    preview: Optional[str] = None
    minimap: Optional[MinimapReference] = None
    seed: Optional[int] = None
    map_size: Optional[float] = None
    variation: Optional[str] = None
    stats: Dict[str, int] = Field(default_factory=dict)


class MapIndex(WorldModel):
    generated: str
    maps: List[MapIndexEntry] = Field(default_factory=list)


class MapStore:
    """
    Saves and loads world documents under one output directory.

    IO errors propagate to the caller; a failed write leaves the in-memory
    document untouched, so callers can retry the write without regenerating.
    """

    def __init__(self, output_dir: Union[str, Path, None] = None, index_filename: Optional[str] = None):
        self.output_dir = Path(output_dir or settings.output_dir)
        self.index_path = self.output_dir / (index_filename or settings.index_filename)

    @property
    def minimap_dir(self) -> Path:
        return self.output_dir / "minimaps"

    def document_path(self, filename: str) -> Path:
        if not filename.endswith(".json"):
            filename = f"{filename}.json"
        return self.output_dir / filename

    def save_document(self, document: WorldDocument, filename: str) -> Path:
        """Write a document as pretty-printed JSON and return its path."""
        path = self.document_path(filename)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(document.to_json(), encoding="utf-8")
        logger.info("Map saved", path=str(path), **document.stats())
        return path

    def load_document(self, filename: str) -> WorldDocument:
        """
        Load and validate a saved document.

        Raises:
            FileNotFoundError: If the file does not exist
            pydantic.ValidationError: If the file is not a valid world document
        """
        path = self.document_path(filename)
        return WorldDocument.from_json(path.read_text(encoding="utf-8"))

    def load_index(self) -> MapIndex:
        """Current manifest, or an empty one when none was written yet."""
        if not self.index_path.exists():
            return MapIndex(generated=datetime.now(timezone.utc).isoformat())
        return MapIndex.model_validate(json.loads(self.index_path.read_text(encoding="utf-8")))

    def update_index(self, entries: List[MapIndexEntry], replace: bool = False) -> MapIndex:
        """
        Merge entries into the manifest, replacing entries with the same id.

        Args:
            entries: Entries to add or replace
            replace: Drop every existing entry first

        Returns:
            The manifest as written
        """
        index = MapIndex(generated=datetime.now(timezone.utc).isoformat())
        if not replace:
            index.maps = list(self.load_index().maps)

        positions = {entry.id: i for i, entry in enumerate(index.maps)}
        for entry in entries:
            if entry.id in positions:
                index.maps[positions[entry.id]] = entry
            else:
                positions[entry.id] = len(index.maps)
                index.maps.append(entry)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.index_path.write_text(
            json.dumps(index.to_dict(), indent=2), encoding="utf-8"
        )
        logger.info("Map index updated", path=str(self.index_path), maps=len(index.maps))
        return index

    def find_entry(self, map_id: str) -> Optional[MapIndexEntry]:
        for entry in self.load_index().maps:
            if entry.id == map_id:
                return entry
        return None

    @staticmethod
    def index_entry(
        document: WorldDocument,
        map_id: str,
        filename: str,
        preview: Optional[str] = None,
        minimap: Optional[dict] = None,
    ) -> MapIndexEntry:
        """Build a manifest entry from a document."""
        return MapIndexEntry(
            id=map_id,
            name=document.theme.name,
            description=document.theme.description,
            filename=filename,
            preview=preview,
            minimap=MinimapReference(**minimap) if minimap else None,
            seed=document.metadata.seed,
            map_size=document.metadata.size,
            stats=document.stats(),
        )

    def publish(
        self,
        document: WorldDocument,
        map_id: str,
        filename: Optional[str] = None,
        minimap: bool = True,
        minimap_options=None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        variation: Optional[str] = None,
    ) -> MapIndexEntry:
        """
        Save a document, render its minimap and record it in the manifest.

        Args:
            document: Document to publish
            map_id: Manifest id of the map
            filename: Output file name, defaults to "<map_id>.json"
            minimap: Render minimap data and images into minimaps/
            minimap_options: MinimapOptions, defaults to the settings values
            name: Display name, defaults to the theme name
            description: Description, defaults to the theme description
            variation: Name of the preset variation the map was built from

        Returns:
            The manifest entry written
        """
        from ..core.minimap import MinimapGenerator, MinimapOptions

        filename = filename or f"{map_id}.json"
        path = self.save_document(document, filename)

        preview = None
        minimap_ref = None
        if minimap:
            options = minimap_options or MinimapOptions(
                resolution=settings.minimap_resolution,
                image_resolutions=settings.minimap_image_resolutions,
            )
            result = MinimapGenerator(document, options).generate(self.minimap_dir, path.stem)
            images = [f"minimaps/{image}" for image in result["images"]]
            minimap_ref = {"data": f"minimaps/{result['data']}", "images": images}
            if images:
                # Highest resolution image
                preview = images[options.image_resolutions.index(max(options.image_resolutions))]

        entry = self.index_entry(document, map_id, path.name, preview=preview, minimap=minimap_ref)
        if name:
            entry.name = name
        if description:
            entry.description = description
        entry.variation = variation
        self.update_index([entry])
        return entry
