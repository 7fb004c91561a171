# -*- coding: utf-8 -*-
"""Typed records for raw prototypes, resolved output and artifact metadata."""
