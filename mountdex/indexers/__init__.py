# -*- coding: utf-8 -*-
"""Index builders over the loaded mount snapshot."""

from mountdex.indexers.mount_index import SearchIndex, TextEntry, build_index
from mountdex.indexers.text import FuzzyMatcher, normalize_text

__all__ = ["FuzzyMatcher", "SearchIndex", "TextEntry", "build_index", "normalize_text"]
