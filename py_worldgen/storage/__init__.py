"""
Flat-file storage of generated worlds.
"""

from .json_store import MapIndex, MapIndexEntry, MapStore, MinimapReference

__all__ = ['MapIndex', 'MapIndexEntry', 'MapStore', 'MinimapReference']
