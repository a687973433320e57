# -*- coding: utf-8 -*-
"""User profile, pregnancy progress and the (simulated) auth capability."""
