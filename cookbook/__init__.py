# -*- coding: utf-8 -*-
"""Cookbook data generator.

Reads game prototypes from one or more forks, computes the closed set of
entities/reagents/recipes the cookbook needs, renders a sprite sheet and
writes versioned JSON for the browsing front-end.
"""

from cookbook.version import project_version

__all__ = ["project_version"]
