"""
Core world generation functionality.
"""

from .seeded_prng import SeededRandom
from .models import WorldDocument, Zone, Path, EnvironmentObject, Vec3
from .builder import WorldBuilder
from .spatial import SpatialIndex, SpatialValidator, is_position_clear
from .compaction import CompactionOptions, TreeCompactor
from .generator import GeneratorOptions, WorldGenerator

__all__ = ['SeededRandom', 'WorldDocument', 'Zone', 'Path', 'EnvironmentObject', 'Vec3',
           'WorldBuilder', 'SpatialIndex', 'SpatialValidator', 'is_position_clear',
           'CompactionOptions', 'TreeCompactor', 'GeneratorOptions', 'WorldGenerator']
