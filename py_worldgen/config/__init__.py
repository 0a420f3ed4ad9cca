"""
Configuration: application settings and the theme registry.
"""

from .config import settings, Settings
from .themes import (
    MAP_THEMES,
    Theme,
    ThemeFeatures,
    get_theme,
    list_themes,
    mix_themes,
    random_theme,
    resolve_zone_color,
)
from .variations import MAP_VARIATIONS, THEME_COMBINATIONS, apply_variation

__all__ = ['settings', 'Settings', 'MAP_THEMES', 'Theme', 'ThemeFeatures', 'get_theme',
           'list_themes', 'mix_themes', 'random_theme', 'resolve_zone_color',
           'MAP_VARIATIONS', 'THEME_COMBINATIONS', 'apply_variation']
