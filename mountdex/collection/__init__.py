# -*- coding: utf-8 -*-
"""User collection: ownership state, durable storage, portable files."""

from mountdex.collection.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from mountdex.collection.store import CollectionState, CollectionStore, percentage
from mountdex.collection.transfer import (
    SCHEMA,
    SCHEMA_VERSION,
    CollectionFile,
    ImportResult,
    export_collection,
    import_collection,
    parse_collection_file,
    read_collection_file,
    write_collection_file,
)

__all__ = [
    "SCHEMA",
    "SCHEMA_VERSION",
    "CollectionFile",
    "CollectionState",
    "CollectionStore",
    "ImportResult",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "export_collection",
    "import_collection",
    "parse_collection_file",
    "percentage",
    "read_collection_file",
    "write_collection_file",
]
