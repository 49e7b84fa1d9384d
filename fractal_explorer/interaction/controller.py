"""
Interaction state machine.

Translates pointer, wheel and keyboard events into viewport changes. A drag
is either a pan or a zoom-rectangle selection, decided once when the pointer
goes down; the controller records whether the rendered image is stale in a
dirty flag that the render driver consumes.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ..core.viewport import FractalVariant, Point, ViewportModel
from ..core.zoom_rect import ImageRect, zoom_to_rectangle
from .events import InputEvent, Key, KeyAction, PointerDown, PointerDrag, PointerUp, Scroll

logger = logging.getLogger(__name__)

SCROLL_ZOOM_IN = 1.1
SCROLL_ZOOM_OUT = 0.9
KEY_ZOOM_IN = 1.5
KEY_ZOOM_OUT = 0.67

# Keyboard pan distance at zoom 1.0, in plane units
KEY_PAN_STEP = 0.1


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    last_pos: Point


@dataclass(frozen=True)
class SelectingRect:
    start_pos: Point
    end_pos: Point


GestureState = Union[Idle, Panning, SelectingRect]

IDLE = Idle()


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only view state for display."""

    zoom: float
    center: Point
    variant: FractalVariant
    julia_c: Point
    max_iterations: int


class InteractionController:
    """Applies input events to a viewport."""

    def __init__(self, viewport: ViewportModel, width: int, height: int,
                 image_rect: Optional[ImageRect] = None,
                 on_toggle_panel: Optional[Callable[[], None]] = None):
        """
        Args:
            viewport: View to mutate
            width, height: Pixel buffer size the view is rendered at
            image_rect: Placement of the render surface in pointer
                coordinates (defaults to the buffer at the origin)
            on_toggle_panel: Called when the panel toggle key is pressed
        """
        self.viewport = viewport
        self.width = width
        self.height = height
        self.image_rect = image_rect or ImageRect(0.0, 0.0, float(width), float(height))
        self.on_toggle_panel = on_toggle_panel
        self.gesture: GestureState = IDLE
        self._dirty = True

    @property
    def dirty(self) -> bool:
        """True when the rendered image no longer matches the view."""
        return self._dirty

    def clear_dirty(self) -> None:
        self._dirty = False

    def mark_dirty(self) -> None:
        self._dirty = True

    @property
    def selection(self) -> Optional[SelectingRect]:
        """The rectangle being selected, for overlay drawing."""
        return self.gesture if isinstance(self.gesture, SelectingRect) else None

    def set_image_rect(self, image_rect: ImageRect) -> None:
        """Update where the render surface sits (e.g. after a window resize)."""
        self.image_rect = image_rect

    def status(self) -> StatusSnapshot:
        vp = self.viewport
        return StatusSnapshot(zoom=vp.zoom, center=vp.center, variant=vp.variant,
                              julia_c=vp.julia_c, max_iterations=vp.max_iterations())

    def handle(self, event: InputEvent) -> None:
        """Dispatch one input event."""
        if isinstance(event, PointerDown):
            self._pointer_down(event)
        elif isinstance(event, PointerDrag):
            self._pointer_drag(event)
        elif isinstance(event, PointerUp):
            self._pointer_up()
        elif isinstance(event, Scroll):
            self._scroll(event)
        elif isinstance(event, Key):
            self._key(event.action)
        else:
            raise TypeError(f"Unsupported event: {event!r}")

    def _pointer_down(self, event: PointerDown) -> None:
        if not isinstance(self.gesture, Idle):
            return
        if not self.image_rect.contains(event.pos):
            return
        if event.fine_select:
            self.gesture = SelectingRect(start_pos=event.pos, end_pos=event.pos)
        else:
            self.gesture = Panning(last_pos=event.pos)
        logger.debug(f"Gesture started: {self.gesture}")

    def _pointer_drag(self, event: PointerDrag) -> None:
        gesture = self.gesture
        if isinstance(gesture, Panning):
            delta = (event.pos[0] - gesture.last_pos[0], event.pos[1] - gesture.last_pos[1])
            self.viewport.pan(delta, self.width, self.height)
            self.gesture = Panning(last_pos=event.pos)
            self._dirty = True
        elif isinstance(gesture, SelectingRect):
            self.gesture = SelectingRect(start_pos=gesture.start_pos, end_pos=event.pos)

    def _pointer_up(self) -> None:
        gesture = self.gesture
        self.gesture = IDLE
        if isinstance(gesture, SelectingRect):
            result = zoom_to_rectangle(gesture.start_pos, gesture.end_pos, self.image_rect,
                                       self.viewport, self.width, self.height)
            if result is not None:
                self.viewport.set_view(result.center, result.zoom)
                self._dirty = True
                logger.info(f"Zoomed to selection: center={result.center}, zoom={result.zoom:.3e}")

    def _scroll(self, event: Scroll) -> None:
        if event.delta_y == 0:
            return
        if event.pos is not None and not self.image_rect.contains(event.pos):
            return
        self.viewport.zoom_by(SCROLL_ZOOM_IN if event.delta_y > 0 else SCROLL_ZOOM_OUT)
        self._dirty = True

    def _key(self, action: KeyAction) -> None:
        if action is KeyAction.TOGGLE_PANEL:
            if self.on_toggle_panel is not None:
                self.on_toggle_panel()
            return

        if action is KeyAction.ZOOM_IN:
            self.viewport.zoom_by(KEY_ZOOM_IN)
        elif action is KeyAction.ZOOM_OUT:
            self.viewport.zoom_by(KEY_ZOOM_OUT)
        else:
            step = KEY_PAN_STEP / self.viewport.zoom
            dx, dy = {
                KeyAction.PAN_LEFT: (-step, 0.0),
                KeyAction.PAN_RIGHT: (step, 0.0),
                KeyAction.PAN_UP: (0.0, -step),
                KeyAction.PAN_DOWN: (0.0, step),
            }[action]
            self.viewport.nudge(dx, dy)
        self._dirty = True

    # Configuration surface

    def select_variant(self, variant: FractalVariant) -> None:
        """Switch fractal and show its canonical view."""
        self.viewport.reset(variant)
        self._dirty = True

    def reset_view(self) -> None:
        self.viewport.reset()
        self._dirty = True

    def set_julia_constant(self, real: float, imag: float) -> None:
        self.viewport.set_julia_c(real, imag)
        self._dirty = True

    def apply_julia_preset(self, name: str) -> None:
        self.viewport.apply_preset(name)
        self._dirty = True
