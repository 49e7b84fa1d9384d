"""
Command-line interface for fractal exploration.

This module provides commands to render views to image files, replay
recorded input events, list presets, and open an interactive explorer
window.
"""

import click
import sys
import json
from pathlib import Path
from typing import Optional, Tuple
import logging

from .. import __version__
from ..api import FractalExplorer
from ..core.fractal_types import FractalRegistry
from ..core.viewport import JULIA_PRESETS, FractalVariant, preset_key
from ..interaction.events import event_from_dict
from ..io.config import ACCELERATORS, ExplorerConfig, load_config_from_args
from ..acceleration.numba_backend import is_numba_available

logger = logging.getLogger(__name__)

VARIANT_CHOICES = [v.value for v in FractalVariant]


def parse_pair(text: str, what: str) -> Tuple[float, float]:
    """Parse "a,b" into two floats."""
    try:
        parts = [float(x.strip()) for x in text.split(',')]
    except ValueError:
        raise click.BadParameter(f"Invalid {what} '{text}'. Use 'real,imag'") from None
    if len(parts) != 2:
        raise click.BadParameter(f"Invalid {what} '{text}'. Use 'real,imag'")
    return parts[0], parts[1]


def _load_config(ctx) -> ExplorerConfig:
    config = load_config_from_args(ctx.obj.get('config_file'))
    if not ctx.obj.get('log_level_forced'):
        logging.getLogger().setLevel(config.log_level.upper())
    return config


def _fail(ctx, error: Exception):
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path (JSON or YAML)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Fractal Explorer - render and explore Mandelbrot, Julia and Koch fractals.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Explorer v{__version__}")
        click.echo(f"Python: {sys.version}")
        click.echo(f"Numba acceleration: {'Available' if is_numba_available() else 'Not available'}")

        if ctx.invoked_subcommand is None:
            sys.exit(0)

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['log_level_forced'] = verbose or quiet


def _apply_view_options(config: ExplorerConfig, variant: Optional[str], width, height,
                        accelerator, julia_c: Optional[str]) -> ExplorerConfig:
    if variant:
        config.variant = variant
    if width:
        config.width = width
    if height:
        config.height = height
    if accelerator:
        config.accelerator = accelerator
    if julia_c:
        try:
            config.preset = preset_key(julia_c)
        except ValueError:
            config.preset = None
            config.julia_c = parse_pair(julia_c, 'Julia constant')
    config.validate()
    return config


@main.command()
@click.argument('variant', type=click.Choice(VARIANT_CHOICES))
@click.argument('output', type=click.Path())
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--center', type=str, help='View center "real,imag"')
@click.option('--zoom', type=float, help='Zoom level (1.0 = canonical extent)')
@click.option('--julia-c', type=str, help='Julia constant "real,imag" or preset name')
@click.option('--accelerator', type=click.Choice(ACCELERATORS), help='Escape-time backend')
@click.pass_context
def render(ctx, variant, output, width, height, center, zoom, julia_c, accelerator):
    """
    Render a single view to an image file.

    VARIANT: Fractal to render (mandelbrot, julia, koch)
    OUTPUT: Output image file path (.png, .jpg, .tiff)
    """
    try:
        config = _apply_view_options(_load_config(ctx), variant, width, height, accelerator, julia_c)
        viewport = config.initial_viewport()

        if center:
            viewport.set_view(parse_pair(center, 'center'), viewport.zoom)
        if zoom is not None:
            if zoom <= 0:
                raise click.BadParameter("zoom must be positive")
            viewport.set_view(viewport.center, zoom)

        explorer = FractalExplorer(config.to_render_config(), viewport)
        click.echo(f"Rendering {viewport.variant.label}...")
        path = explorer.save(output)
        click.echo(f"Render complete: {explorer.renderer.last_render_time:.2f}s")
        click.echo(f"Saved: {path}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('events_file', type=click.Path(exists=True))
@click.argument('output', type=click.Path())
@click.option('--variant', type=click.Choice(VARIANT_CHOICES), help='Starting fractal')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.pass_context
def replay(ctx, events_file, output, variant, width, height):
    """
    Apply recorded input events, then render the resulting view.

    EVENTS_FILE: JSON list of events, e.g. [{"type": "scroll", "delta_y": 1}]
    OUTPUT: Output image file path
    """
    try:
        config = _apply_view_options(_load_config(ctx), variant, width, height, None, None)
        events = json.loads(Path(events_file).read_text())
        if not isinstance(events, list):
            raise ValueError("Events file must contain a JSON list")

        explorer = FractalExplorer(config.to_render_config(), config.initial_viewport())
        for entry in events:
            explorer.handle(event_from_dict(entry))

        status = explorer.status()
        click.echo(f"Applied {len(events)} events: zoom={status.zoom:.3e}, "
                   f"center=({status.center[0]:.6f}, {status.center[1]:.6f})")
        path = explorer.save(output)
        click.echo(f"Saved: {path}")

    except Exception as e:
        _fail(ctx, e)


@main.command('list-presets')
def list_presets():
    """List named Julia constants."""
    click.echo("Julia presets:")
    for name, (real, imag) in JULIA_PRESETS.items():
        click.echo(f"  {name:<15} c = {real:+.4f} {imag:+.4f}i")


@main.command('list-fractals')
def list_fractals():
    """List available fractals."""
    click.echo("Available fractals:")
    for name, description in FractalRegistry.list_fractals().items():
        click.echo(f"  {name:<12} {description}")


@main.command()
@click.argument('variant', type=click.Choice(VARIANT_CHOICES), required=False)
@click.option('--width', '-w', type=int, help='Render width')
@click.option('--height', '-h', type=int, help='Render height')
@click.option('--julia-c', type=str, help='Julia constant "real,imag" or preset name')
@click.pass_context
def explore(ctx, variant, width, height, julia_c):
    """
    Interactive fractal exploration (requires Tk).

    Drag to pan, Shift+drag to zoom to a rectangle, mouse wheel or +/- to
    zoom, arrow keys to pan, Tab to toggle the control panel.
    """
    try:
        try:
            import tkinter as tk
        except ImportError as e:
            click.echo(f"Error: GUI dependencies not available: {e}", err=True)
            sys.exit(1)

        from .explorer_window import ExplorerWindow

        config = _apply_view_options(_load_config(ctx), variant, width, height, None, julia_c)
        explorer = FractalExplorer(config.to_render_config(), config.initial_viewport())

        root = tk.Tk()
        ExplorerWindow(root, explorer)
        click.echo("Starting interactive explorer...")
        root.mainloop()

    except Exception as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
