# -*- coding: utf-8 -*-
"""Mountdex core library.

- Dataset: immutable mount snapshot (data/mounts.json + dataset.meta.json)
- Index + query: fuzzy text, expansion buckets, id lookup
- Collection: locally persisted ownership + portable collection files
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
