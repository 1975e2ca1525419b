"""
Tunable parameters for layout, collision handling, edge routing and the
canvas controller.

Every public function that reads one of these accepts an optional config
instance and falls back to the defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Viewport limits
# ---------------------------------------------------------------------------

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_EPSILON = 0.0001


@dataclass
class LayoutConfig:
    """Configuration for child placement, rebalancing and collision handling."""
    horizontal_gap: float = 200
    vertical_padding: float = 40
    collision_padding: float = 20
    rebalance_threshold: float = 10
    trident_threshold: float = 1
    max_collision_attempts: int = 20
    global_collision_attempts: int = 10
    # Step used when Enter creates a sibling of a free-standing node
    sibling_offset_y: float = 100


@dataclass
class RoutingConfig:
    """Configuration for connection curves."""
    reach_factor: float = 0.4
    min_reach: float = 40
    max_reach: float = 120
    exit_spread: float = 20  # total spread, i.e. +/- 10 px
    dy_extension: float = 0.25
    dy_normaliser: float = 200
    corridor_padding: float = 20
    bypass_margin: float = 30
    bypass_reach_factor: float = 0.3


@dataclass
class CanvasConfig:
    """Configuration for pointer handling on the canvas."""
    node_drag_threshold: float = 5
    canvas_drag_threshold: float = 10
    resize_handle_size: float = 12
    hit_margin: float = 0


@dataclass
class GroupConfig:
    """Configuration for group braces."""
    brace_offset: float = 8
    tip_offset: float = 20
    label_gap: float = 20
    # Vertical spread must exceed horizontal spread times this for a vertical brace
    orientation_factor: float = 1.0
