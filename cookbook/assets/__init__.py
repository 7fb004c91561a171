# -*- coding: utf-8 -*-
"""Image assets (sprite sheet)."""
