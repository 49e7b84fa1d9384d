"""
Tk window for interactive exploration.

The window only translates Tk events into explorer input events, draws the
selection overlay, and shows frames; all view logic lives in the
interaction controller.
"""

import logging
import tkinter as tk
from tkinter import ttk

from PIL import Image, ImageTk

from ..api import FractalExplorer
from ..core.viewport import JULIA_C_LIMIT, JULIA_PRESETS, FractalVariant
from ..core.zoom_rect import selection_is_large_enough
from ..interaction.events import Key, KeyAction, PointerDown, PointerDrag, PointerUp, Scroll

logger = logging.getLogger(__name__)

# Tk modifier bit for Shift in event.state
_SHIFT_MASK = 0x0001

_KEY_BINDINGS = {
    '<plus>': KeyAction.ZOOM_IN,
    '<equal>': KeyAction.ZOOM_IN,
    '<KP_Add>': KeyAction.ZOOM_IN,
    '<minus>': KeyAction.ZOOM_OUT,
    '<KP_Subtract>': KeyAction.ZOOM_OUT,
    '<Left>': KeyAction.PAN_LEFT,
    '<Right>': KeyAction.PAN_RIGHT,
    '<Up>': KeyAction.PAN_UP,
    '<Down>': KeyAction.PAN_DOWN,
    '<Tab>': KeyAction.TOGGLE_PANEL,
}

# Shown in the canvas corner while the control panel is hidden
_PANEL_HINT = "Press Tab for controls\nShift+drag to zoom to area"

_PRESET_LABELS = {
    'dragon': "Dragon",
    'spiral': "Spiral",
    'lightning': "Lightning",
    'douady_rabbit': "Douady Rabbit",
}


class ExplorerWindow:
    """Main explorer window: control panel plus render canvas."""

    def __init__(self, root: tk.Tk, explorer: FractalExplorer):
        self.root = root
        self.explorer = explorer
        self.controller = explorer.controller
        self.controller.on_toggle_panel = self.toggle_panel
        self.panel_visible = True
        self._photo = None

        config = explorer.renderer.config
        root.title("Fractal Explorer")

        self.panel = ttk.Frame(root, padding=8)
        self.panel.pack(side=tk.LEFT, fill=tk.Y)
        self.canvas = tk.Canvas(root, width=config.width, height=config.height,
                                bg='black', highlightthickness=0)
        self.canvas.pack(side=tk.LEFT)

        self._build_panel()
        self._bind_events()
        self.refresh()

    def _build_panel(self):
        viewport = self.explorer.viewport
        ttk.Label(self.panel, text="Fractal Explorer", font=('TkDefaultFont', 12, 'bold')).pack(anchor=tk.W)
        ttk.Separator(self.panel).pack(fill=tk.X, pady=4)

        ttk.Label(self.panel, text="Fractal Type:").pack(anchor=tk.W)
        self.variant_var = tk.StringVar(value=viewport.variant.label)
        selector = ttk.Combobox(self.panel, textvariable=self.variant_var, state='readonly',
                                values=[v.label for v in FractalVariant])
        selector.bind('<<ComboboxSelected>>', self._on_variant_selected)
        selector.pack(fill=tk.X)

        self.julia_frame = ttk.Frame(self.panel)
        ttk.Label(self.julia_frame, text="Julia Set Parameters:").pack(anchor=tk.W, pady=(6, 0))
        self.c_real = tk.DoubleVar(value=viewport.julia_c[0])
        self.c_imag = tk.DoubleVar(value=viewport.julia_c[1])
        for label, var in (("c (real)", self.c_real), ("c (imaginary)", self.c_imag)):
            ttk.Label(self.julia_frame, text=label).pack(anchor=tk.W)
            tk.Scale(self.julia_frame, variable=var, from_=-JULIA_C_LIMIT, to=JULIA_C_LIMIT,
                     resolution=0.001, orient=tk.HORIZONTAL, length=200,
                     command=self._on_julia_slider).pack(fill=tk.X)
        ttk.Label(self.julia_frame, text="Presets:").pack(anchor=tk.W, pady=(6, 0))
        for key in JULIA_PRESETS:
            ttk.Button(self.julia_frame, text=_PRESET_LABELS.get(key, key),
                       command=lambda k=key: self._on_preset(k)).pack(fill=tk.X)
        self.anchor = ttk.Separator(self.panel)
        self.anchor.pack(fill=tk.X, pady=4)

        ttk.Label(self.panel, text="Current View:").pack(anchor=tk.W)
        self.status_var = tk.StringVar()
        ttk.Label(self.panel, textvariable=self.status_var, justify=tk.LEFT).pack(anchor=tk.W)

        ttk.Separator(self.panel).pack(fill=tk.X, pady=4)
        ttk.Label(self.panel, justify=tk.LEFT, text=(
            "Controls:\n"
            "• Mouse wheel: Zoom\n"
            "• Click & drag: Pan\n"
            "• Shift + drag: Zoom to rectangle\n"
            "• Tab: Toggle this panel"
        )).pack(anchor=tk.W)
        ttk.Button(self.panel, text="Reset View", command=self._on_reset).pack(fill=tk.X, pady=4)
        self._sync_julia_frame()

    def _bind_events(self):
        self.canvas.bind('<ButtonPress-1>', self._on_press)
        self.canvas.bind('<B1-Motion>', self._on_drag)
        self.canvas.bind('<ButtonRelease-1>', self._on_release)
        self.canvas.bind('<MouseWheel>', lambda e: self._on_scroll(e.delta, e))
        # X11 reports the wheel as buttons 4 and 5
        self.canvas.bind('<Button-4>', lambda e: self._on_scroll(1, e))
        self.canvas.bind('<Button-5>', lambda e: self._on_scroll(-1, e))
        for sequence, action in _KEY_BINDINGS.items():
            self.root.bind(sequence, lambda e, a=action: self._dispatch(Key(a)) or 'break')

    def _dispatch(self, event):
        self.controller.handle(event)
        self.refresh()

    def _on_press(self, event):
        fine_select = bool(event.state & _SHIFT_MASK)
        self._dispatch(PointerDown((event.x, event.y), fine_select))

    def _on_drag(self, event):
        self._dispatch(PointerDrag((event.x, event.y)))

    def _on_release(self, event):
        self._dispatch(PointerUp())

    def _on_scroll(self, delta, event):
        self._dispatch(Scroll(float(delta), (event.x, event.y)))

    def _on_variant_selected(self, _event):
        label = self.variant_var.get()
        variant = next(v for v in FractalVariant if v.label == label)
        self.controller.select_variant(variant)
        self._sync_julia_frame()
        self.refresh()

    def _on_julia_slider(self, _value):
        self.controller.set_julia_constant(self.c_real.get(), self.c_imag.get())
        self.refresh()

    def _on_preset(self, key):
        self.controller.apply_julia_preset(key)
        real, imag = self.explorer.viewport.julia_c
        self.c_real.set(real)
        self.c_imag.set(imag)
        self.refresh()

    def _on_reset(self):
        self.controller.reset_view()
        self.refresh()

    def _sync_julia_frame(self):
        if self.explorer.viewport.variant is FractalVariant.JULIA:
            self.julia_frame.pack(fill=tk.X, before=self.anchor)
        else:
            self.julia_frame.pack_forget()

    def toggle_panel(self):
        self.panel_visible = not self.panel_visible
        if self.panel_visible:
            self.panel.pack(side=tk.LEFT, fill=tk.Y, before=self.canvas)
        else:
            self.panel.pack_forget()
        self._draw_hint()

    def refresh(self):
        """Redraw the frame if needed and update the overlay and status."""
        if self.controller.dirty or self._photo is None:
            image = self.explorer.frame()
            self._photo = ImageTk.PhotoImage(Image.fromarray(image))
            self.canvas.delete('frame')
            self.canvas.create_image(0, 0, anchor=tk.NW, image=self._photo, tags='frame')
            self._draw_hint()

        self._draw_selection()

        status = self.controller.status()
        self.status_var.set(f"Zoom: {status.zoom:.2e}\n"
                            f"Center: ({status.center[0]:.6f}, {status.center[1]:.6f})")

    def _draw_hint(self):
        self.canvas.delete('hint')
        if self.panel_visible:
            return
        self.canvas.create_text(10, 10, anchor=tk.NW, text=_PANEL_HINT, fill='white',
                                font=('TkDefaultFont', 10), tags='hint')

    def _draw_selection(self):
        self.canvas.delete('selection')
        selection = self.controller.selection
        if selection is None:
            return

        (x0, y0), (x1, y1) = selection.start_pos, selection.end_pos
        color = '#90ee90' if selection_is_large_enough(selection.start_pos, selection.end_pos) else '#ff8080'
        self.canvas.create_rectangle(x0, y0, x1, y1, outline=color, width=2, tags='selection')
        for cx, cy in ((x0, y0), (x1, y0), (x0, y1), (x1, y1)):
            self.canvas.create_oval(cx - 4, cy - 4, cx + 4, cy + 4, fill=color, outline='',
                                    tags='selection')
        self.canvas.create_text((x0 + x1) / 2, (y0 + y1) / 2 - 15, fill=color,
                                font=('TkFixedFont', 10), tags='selection',
                                text=f"{int(abs(x1 - x0))}x{int(abs(y1 - y0))} px")
