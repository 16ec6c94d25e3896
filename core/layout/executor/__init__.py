#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Executor Module

Provides block flow execution (measurement, card placement, pagination).
"""

from .block_flow import BlockFlowExecutor, FlowState, LayoutPlan, PlacedBox, PlacementMode

__all__ = [
    "BlockFlowExecutor",
    "FlowState",
    "LayoutPlan",
    "PlacedBox",
    "PlacementMode",
]
