# -*- coding: utf-8 -*-
"""Settings and fork list loading."""

from cookbook.config.loader import ConfigLoader, cookbook_config

__all__ = ["ConfigLoader", "cookbook_config"]
