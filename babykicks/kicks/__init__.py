# -*- coding: utf-8 -*-
"""
Kick counting: debouncing, session state machine, anomaly scoring, history.
"""

from .counter import KickCounter
from .debounce import KickDebouncer
from .models import AnomalyAnalysis, AnomalySeverity, CounterStatus, CountMethod, KickSession

__all__ = [
    'AnomalyAnalysis',
    'AnomalySeverity',
    'CounterStatus',
    'CountMethod',
    'KickCounter',
    'KickDebouncer',
    'KickSession',
]
