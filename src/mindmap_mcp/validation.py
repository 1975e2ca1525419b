"""
Input validation for mind-map MCP server tool parameters.

Provides reusable validators that produce clear error messages for all
parameters received from LLM callers.
"""

from __future__ import annotations

import re
from typing import Any


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_string(value: Any, field_name: str, *, allow_empty: bool = True) -> str:
    """Ensure *value* is a string (optionally non-empty)."""
    if not isinstance(value, str):
        raise ValidationError(f"'{field_name}' must be a string, got {type(value).__name__}.")
    if not allow_empty and not value.strip():
        raise ValidationError(f"'{field_name}' must not be empty.")
    return value


def validate_color(value: Any, field_name: str, *, allow_none: bool = False) -> str:
    """Validate a CSS-style hex color (#RGB, #RRGGBB, #RRGGBBAA) or 'none'."""
    if allow_none and (value == "none" or value == ""):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"'{field_name}' must be a color string, got {type(value).__name__}.")
    value = value.strip()
    if not re.match(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$", value):
        raise ValidationError(
            f"'{field_name}' must be a valid hex color (#RGB, #RRGGBB, or #RRGGBBAA), got '{value}'."
        )
    return value


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_int(
    value: Any,
    field_name: str,
    *,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    """Validate an integer value and optional range."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be an integer, got {type(value).__name__}."
        )
    if min_val is not None and value < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {value}."
        )
    if max_val is not None and value > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {value}."
        )
    return value


def validate_bool(value: Any, field_name: str) -> bool:
    """Ensure *value* is a boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a boolean, got {type(value).__name__}."
        )
    return value


def validate_enum(value: Any, field_name: str, allowed: set[str]) -> str:
    """Validate that a string value is one of the allowed choices (case-insensitive)."""
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}."
        )
    normalized = value.strip().upper()
    if normalized not in {a.upper() for a in allowed}:
        choices = ", ".join(sorted(allowed))
        raise ValidationError(
            f"'{field_name}' must be one of [{choices}], got '{value}'."
        )
    return normalized


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


def validate_positive_number(value: Any, field_name: str) -> float:
    """Validate that a number is positive (> 0)."""
    return validate_number(value, field_name, min_val=0.001)


# ---------------------------------------------------------------------------
# Tool actions
# ---------------------------------------------------------------------------

_CANVAS_ACTIONS = {"CREATE", "LIST", "DELETE", "SNAPSHOT"}
_EDIT_ACTIONS = {
    "ADD_NODE", "ADD_CHILD", "ADD_SIBLING", "MOVE_NODE", "RESIZE_NODE",
    "SET_TEXT", "PIN", "DELETE_NODE", "CONNECT", "DISCONNECT", "SET_LABEL",
    "GROUP", "UNGROUP",
}
_LAYOUT_ACTIONS = {
    "PREVIEW_CHILD", "REFLOW", "CENTER_PARENT", "REBALANCE_TREE",
    "RESOLVE_COLLISIONS",
}
_VIEW_ACTIONS = {
    "ZOOM", "PAN", "CENTER_ON", "SCREEN_TO_WORLD", "WORLD_TO_SCREEN",
    "POINTER_DOWN", "POINTER_MOVE", "POINTER_UP", "TAP", "KEY",
}
_INSPECT_ACTIONS = {
    "NODES", "CONNECTIONS", "GROUPS", "OVERLAPS", "ROUTES", "SUBTREE",
    "INFO", "INTENTS",
}

_VALID_KEYS = {"ESCAPE", "TAB", "ENTER", "RETURN", "DELETE", "BACKSPACE"}
_VALID_MODIFIERS = {"SHIFT", "PAN"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


# ---------------------------------------------------------------------------
# Composite / domain validators
# ---------------------------------------------------------------------------

def validate_key(value: Any) -> str:
    """Validate a keyboard key name (escape, tab, enter, delete...)."""
    return validate_enum(value, "key", _VALID_KEYS).lower()


def validate_modifiers(value: Any) -> set[str]:
    """Validate a list of held modifiers (shift, pan)."""
    if value is None:
        return set()
    items = validate_list(value, "modifiers")
    return {validate_enum(m, f"modifiers[{i}]", _VALID_MODIFIERS).lower()
            for i, m in enumerate(items)}


def validate_zoom_factor(value: Any) -> float:
    """Validate a pinch/zoom multiplier (> 0)."""
    return validate_positive_number(value, "factor")


def validate_size(width: Any, height: Any) -> tuple[float, float]:
    """Validate a node size; the model clamps it to its minimums."""
    return validate_positive_number(width, "width"), validate_positive_number(height, "height")


def validate_node_ids(value: Any, field_name: str = "node_ids") -> list[str]:
    """Validate a non-empty list of node id strings."""
    items = validate_list(value, field_name, min_length=1)
    for i, item in enumerate(items):
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(f"'{field_name}[{i}]' must be a non-empty string.")
    return [item.strip() for item in items]


def validate_text_ranges(value: Any) -> list[tuple[int, int]] | None:
    """Validate word-anchor ranges given as [location, length] pairs or
    {"location": .., "length": ..} dicts.  None or [] means no anchor."""
    if value is None:
        return None
    items = validate_list(value, "ranges")
    if not items:
        return None
    ranges: list[tuple[int, int]] = []
    for i, item in enumerate(items):
        if isinstance(item, dict):
            if "location" not in item:
                raise ValidationError(f"Range at index {i} missing required key 'location'.")
            if "length" not in item:
                raise ValidationError(f"Range at index {i} missing required key 'length'.")
            loc, length = item["location"], item["length"]
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            loc, length = item
        else:
            raise ValidationError(
                f"Range at index {i} must be a [location, length] pair or a dict/object."
            )
        validate_int(loc, f"ranges[{i}].location", min_val=0)
        validate_int(length, f"ranges[{i}].length", min_val=1)
        ranges.append((loc, length))
    return ranges


def validate_rect_dict(value: Any, field_name: str) -> dict[str, float] | None:
    """Validate an optional {"x", "y", "width", "height"} rectangle."""
    if value is None:
        return None
    rect = validate_dict(value, field_name)
    for key in ("x", "y", "width", "height"):
        if key not in rect:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
        validate_number(rect[key], f"{field_name}.{key}")
    if rect["width"] < 0 or rect["height"] < 0:
        raise ValidationError(f"'{field_name}' must have a non-negative width and height.")
    return {k: float(rect[k]) for k in ("x", "y", "width", "height")}
