"""
Deterministic themed world generation.
"""

from .core import WorldDocument, WorldGenerator
from .config import MAP_THEMES, get_theme, list_themes
from .errors import ConfigurationError, UnknownThemeError, WorldGenError

__version__ = "0.1.0"

__all__ = ['WorldDocument', 'WorldGenerator', 'MAP_THEMES', 'get_theme', 'list_themes',
           'ConfigurationError', 'UnknownThemeError', 'WorldGenError']
