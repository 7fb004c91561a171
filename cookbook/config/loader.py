# -*- coding: utf-8 -*-
"""Project settings (conf/settings.ini)."""

from __future__ import annotations

import configparser
import os
from pathlib import Path
from typing import Optional


class ConfigLoader:
    def __init__(self, config_path: Optional[Path] = None):
        # cookbook/config/* -> project root
        self.project_root = Path(__file__).resolve().parents[2]
        self.config_path = Path(config_path) if config_path else self.project_root / "conf" / "settings.ini"

        self.config = configparser.ConfigParser()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file missing: {self.config_path}")

        self.config.read(self.config_path, encoding="utf-8")

    def get(self, section: str, key: str) -> Optional[str]:
        """Get a value, expanding `~` to the user's home directory."""
        val = self.config.get(section, key, fallback=None)
        if val and "~" in val:
            return os.path.expanduser(val)
        return val

    def path(self, section: str, key: str) -> Optional[Path]:
        """Like `get()`, with relative paths anchored at the project root."""
        val = self.get(section, key)
        if not val:
            return None
        p = Path(val)
        return p if p.is_absolute() else self.project_root / p


# Module-level singleton
cookbook_config = ConfigLoader()
