"""MYFC workout bookmarks: shared client store and bookmark API."""

__version__ = "1.0.0"
