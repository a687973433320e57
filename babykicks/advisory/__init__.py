# -*- coding: utf-8 -*-
"""
Advisory service access (weekly insights + anomaly analysis).
"""

from .client import AdvisoryClient, AdvisoryError, AdvisorySettings

__all__ = [
    'AdvisoryClient',
    'AdvisoryError',
    'AdvisorySettings',
]
