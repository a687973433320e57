# -*- coding: utf-8 -*-
"""Tap debouncing.

Standard fetal-movement counting guidance treats repeated movements within
five minutes as one episode. The window is anchored at the first tap of the
episode; later taps inside it do not push it forward.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

EPISODE_WINDOW_MS = 5 * 60 * 1000


@dataclass
class KickDebouncer:
    count: int = 0
    raw_count: int = 0
    last_episode_start: Optional[int] = None
    window_ms: int = EPISODE_WINDOW_MS

    def record_tap(self, now_ms: int) -> bool:
        """Register one tap. Returns True when it opened a new valid episode."""
        self.raw_count += 1
        # Strict ">": a tap exactly window_ms after the anchor is still the same episode.
        if self.last_episode_start is None or now_ms - self.last_episode_start > self.window_ms:
            self.count += 1
            self.last_episode_start = now_ms
            return True
        return False

    def reset(self) -> None:
        self.count = 0
        self.raw_count = 0
        self.last_episode_start = None
