# -*- coding: utf-8 -*-
from mountdex.config.loader import ConfigLoader, MountdexConfig, load_config

__all__ = ["ConfigLoader", "MountdexConfig", "load_config"]
