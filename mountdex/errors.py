# -*- coding: utf-8 -*-
"""Error taxonomy shared by the library, CLI and web layers."""

from __future__ import annotations


class MountdexError(RuntimeError):
    pass


class LoadError(MountdexError):
    """Dataset could not be read or parsed. Retry by loading again."""


class FormatError(MountdexError):
    """Collection file is not a supported mop-mounts collection."""


class StorageError(MountdexError):
    """Durable write/read of the collection blob failed.

    Never fatal: the collection store logs it and keeps its in-memory state.
    """


class IndexNotBuiltError(MountdexError):
    """A query ran before any dataset was loaded into the session."""
