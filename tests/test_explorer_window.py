import pytest

pytest.importorskip("tkinter")
pytest.importorskip("PIL.ImageTk")

from fractal_explorer.cli.explorer_window import ExplorerWindow
from fractal_explorer.core.viewport import ViewportModel
from fractal_explorer.interaction.controller import InteractionController
from fractal_explorer.interaction.events import Key, KeyAction


class FakeCanvas:
    """Records canvas text items by tag."""

    def __init__(self):
        self.items = []

    def delete(self, tag):
        self.items = [item for item in self.items if item['tags'] != tag]

    def create_text(self, x, y, **options):
        self.items.append(options)

    def texts(self, tag):
        return [item['text'] for item in self.items if item['tags'] == tag]


class FakePanel:
    def __init__(self):
        self.packed = True

    def pack(self, **options):
        self.packed = True

    def pack_forget(self):
        self.packed = False


@pytest.fixture
def window():
    # Skip Tk widget construction; only the panel toggle is exercised
    win = ExplorerWindow.__new__(ExplorerWindow)
    win.canvas = FakeCanvas()
    win.panel = FakePanel()
    win.panel_visible = True
    return win


def test_hidden_panel_shows_hint(window):
    window.toggle_panel()
    assert not window.panel_visible
    assert not window.panel.packed
    hints = window.canvas.texts('hint')
    assert len(hints) == 1
    assert "Press Tab for controls" in hints[0]
    assert "Shift+drag to zoom to area" in hints[0]


def test_showing_panel_removes_hint(window):
    window.toggle_panel()
    window.toggle_panel()
    assert window.panel_visible
    assert window.panel.packed
    assert window.canvas.texts('hint') == []


def test_tab_key_toggles_panel_through_controller(window):
    controller = InteractionController(ViewportModel(), 60, 40, on_toggle_panel=window.toggle_panel)
    controller.clear_dirty()
    controller.handle(Key(KeyAction.TOGGLE_PANEL))
    assert not window.panel_visible
    assert window.canvas.texts('hint')
    assert not controller.dirty
