# -*- coding: utf-8 -*-
"""Mountdex web service package.

- Backend: FastAPI (ASGI)
- Data: data/mounts.json (+ dataset.meta.json)
- Collection: JSON storage file on the server host
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
