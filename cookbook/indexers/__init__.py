# -*- coding: utf-8 -*-
"""Indexers that prune, classify and normalize prototype data."""
