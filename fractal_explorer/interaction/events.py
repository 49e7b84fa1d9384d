"""
Abstract input events consumed by the interaction controller.

Positions are in the pointer coordinate space of the UI layer; the
controller relates them to the render surface through an ImageRect.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..core.viewport import Point


class KeyAction(Enum):
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    PAN_UP = "pan_up"
    PAN_DOWN = "pan_down"
    TOGGLE_PANEL = "toggle_panel"


@dataclass(frozen=True)
class PointerDown:
    pos: Point
    fine_select: bool = False


@dataclass(frozen=True)
class PointerDrag:
    pos: Point


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class Scroll:
    """Wheel movement; ``pos`` is the hover position if the UI knows it."""

    delta_y: float
    pos: Optional[Point] = None


@dataclass(frozen=True)
class Key:
    action: KeyAction


InputEvent = Union[PointerDown, PointerDrag, PointerUp, Scroll, Key]


def event_from_dict(data: Dict[str, Any]) -> InputEvent:
    """
    Build an event from a plain mapping, e.g. one entry of a replay file.

    Examples:
        {"type": "pointer_down", "pos": [100, 80], "fine_select": true}
        {"type": "scroll", "delta_y": 1}
        {"type": "key", "action": "zoom_in"}
    """
    kind = data.get('type')
    if kind == 'pointer_down':
        return PointerDown(tuple(data['pos']), bool(data.get('fine_select', False)))
    if kind == 'pointer_drag':
        return PointerDrag(tuple(data['pos']))
    if kind == 'pointer_up':
        return PointerUp()
    if kind == 'scroll':
        pos = data.get('pos')
        return Scroll(float(data['delta_y']), tuple(pos) if pos is not None else None)
    if kind == 'key':
        return Key(KeyAction(data['action']))
    raise ValueError(f"Unknown event type '{kind}'")
