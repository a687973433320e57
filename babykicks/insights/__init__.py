# -*- coding: utf-8 -*-
"""Weekly advisory content (cached per week, language and timezone)."""
