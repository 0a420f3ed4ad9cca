"""FastAPI main application."""

from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .. import __version__
from ..config import settings
from ..config.themes import MAP_THEMES, get_theme
from ..core.generator import WorldGenerator
from ..errors import ConfigurationError, UnknownThemeError
from ..storage import MapStore
from ..utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="World Generator API",
    description="Deterministic themed game world generation",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> MapStore:
    return MapStore(settings.output_dir)


# Request/Response models
class MapGenerationRequest(BaseModel):
    """Request to generate a new map."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    theme: str = Field(description="Theme name, e.g. DARK_FOREST")
    seed: Optional[int] = Field(None, description="Random seed for reproducible generation")
    map_size: float = Field(
        default_factory=lambda: settings.default_map_size,
        gt=0,
        le=settings.max_map_size,
        description="Map size in world units",
    )
    features: Optional[Dict[str, Any]] = Field(None, description="Partial feature overrides")
    compact: bool = Field(True, description="Compact trees into clusters")
    save: bool = Field(False, description="Save the map and add it to the index")
    minimap: bool = Field(False, description="Render minimap assets when saving")


class MapGenerationResponse(BaseModel):
    """Generated map with its summary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    theme: str
    seed: int
    stats: Dict[str, int]
    filename: Optional[str] = None
    document: Dict[str, Any]


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "World Generator API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check(store: MapStore = Depends(get_store)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "themes": len(MAP_THEMES),
        "output_dir": str(store.output_dir),
    }


@app.get("/themes")
async def list_themes():
    """List all registered themes."""
    return [theme.model_dump(mode="json", by_alias=True) for theme in MAP_THEMES.values()]


@app.get("/themes/{name}")
async def get_theme_details(name: str):
    """Get one theme by name."""
    try:
        theme = get_theme(name)
    except UnknownThemeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return theme.model_dump(mode="json", by_alias=True)


@app.post("/maps/generate", response_model=MapGenerationResponse, response_model_by_alias=True)
def generate_map(request: MapGenerationRequest, store: MapStore = Depends(get_store)):
    """
    Generate a map synchronously.

    Unknown themes return 404; malformed feature overrides return 422.
    """
    logger.info("Map generation requested", request=request.model_dump())

    try:
        generator = WorldGenerator(seed=request.seed, map_size=request.map_size)
        document = generator.generate(
            request.theme, features=request.features, compact=request.compact
        )
    except UnknownThemeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ConfigurationError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    map_id = f"{document.theme.key.lower()}_{generator.seed}"
    filename = None
    if request.save:
        try:
            entry = store.publish(document, map_id, minimap=request.minimap)
        except OSError as e:
            logger.error("Map save failed", map_id=map_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to save map")
        filename = entry.filename

    return MapGenerationResponse(
        id=map_id,
        theme=document.theme.key,
        seed=generator.seed,
        stats=document.stats(),
        filename=filename,
        document=document.to_dict(),
    )


@app.get("/maps")
async def list_maps(store: MapStore = Depends(get_store)):
    """List all saved maps from the index."""
    return store.load_index().to_dict()


@app.get("/maps/{map_id}")
def get_map(map_id: str, store: MapStore = Depends(get_store)):
    """Get a saved map document."""
    entry = store.find_entry(map_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Map not found")
    try:
        document = store.load_document(entry.filename)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Map file not found")
    return document.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
