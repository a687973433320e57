# -*- coding: utf-8 -*-
"""BabyKicks backend: fetal movement counting sessions and advisory content."""

__version__ = "1.0.0"
