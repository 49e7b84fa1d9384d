"""
Configuration loading for the fractal explorer.

Settings come from built-in defaults, then an optional JSON or YAML file,
then ``FRACTAL_EXPLORER_*`` environment variables.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..api import RenderConfig
from ..core.viewport import JULIA_C_LIMIT, FractalVariant, ViewportModel, preset_key

logger = logging.getLogger(__name__)

ACCELERATORS = ('numpy', 'numba', 'multiprocessing')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

ENV_PREFIX = 'FRACTAL_EXPLORER_'


@dataclass
class ExplorerConfig:
    """Settings for rendering and exploration."""

    # Pixel buffer
    width: int = 1200
    height: int = 800

    # Initial view
    variant: str = 'mandelbrot'
    julia_c: Tuple[float, float] = (-0.7269, 0.1889)
    preset: Optional[str] = None

    # Performance
    accelerator: str = 'numpy'
    num_processes: Optional[int] = None
    band_rows: int = 64

    log_level: str = 'INFO'

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")

        FractalVariant.from_name(self.variant)

        if len(self.julia_c) != 2:
            raise ValueError("julia_c must be (real, imag)")
        if any(abs(v) > JULIA_C_LIMIT for v in self.julia_c):
            raise ValueError(f"julia_c components must lie in [-{JULIA_C_LIMIT}, {JULIA_C_LIMIT}]")

        if self.preset is not None:
            preset_key(self.preset)

        if self.accelerator not in ACCELERATORS:
            raise ValueError(f"accelerator must be one of: {', '.join(ACCELERATORS)}")
        if self.num_processes is not None and self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")
        if self.band_rows < 1:
            raise ValueError("band_rows must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['julia_c'] = list(self.julia_c)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExplorerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        values = dict(data)
        if 'julia_c' in values:
            values['julia_c'] = tuple(float(v) for v in values['julia_c'])
        config = cls(**values)
        config.validate()
        return config

    def initial_viewport(self) -> ViewportModel:
        """Viewport in the canonical view of the configured variant."""
        viewport = ViewportModel.for_variant(FractalVariant.from_name(self.variant),
                                             julia_c=self.julia_c)
        if self.preset:
            viewport.apply_preset(self.preset)
        return viewport

    def to_render_config(self) -> RenderConfig:
        return RenderConfig(
            width=self.width,
            height=self.height,
            accelerator=self.accelerator,
            num_processes=self.num_processes,
            band_rows=self.band_rows,
        )


class ConfigManager:
    """Reads and writes configuration files (JSON or YAML)."""

    def default_config(self) -> ExplorerConfig:
        return ExplorerConfig()

    def _format_for(self, path: Path) -> str:
        suffix = path.suffix.lower()
        if suffix in ('.yaml', '.yml'):
            return 'yaml'
        if suffix == '.json':
            return 'json'
        raise ValueError(f"Unsupported config format '{suffix}'. Use .json, .yaml or .yml")

    def load_config(self, path) -> ExplorerConfig:
        """
        Load a configuration file.

        Args:
            path: JSON or YAML file

        Returns:
            Validated ExplorerConfig (defaults for keys the file omits)
        """
        path = Path(path)
        text = path.read_text()
        if self._format_for(path) == 'yaml':
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")

        logger.info(f"Loaded configuration: {path}")
        return ExplorerConfig.from_dict(data)

    def save_config(self, config: ExplorerConfig, path) -> Path:
        path = Path(path)
        data = config.to_dict()
        if self._format_for(path) == 'yaml':
            path.write_text(yaml.safe_dump(data, sort_keys=False))
        else:
            path.write_text(json.dumps(data, indent=2))
        logger.info(f"Saved configuration: {path}")
        return path


class EnvironmentConfig:
    """Environment variable overrides."""

    _conversions = {
        'width': int,
        'height': int,
        'variant': str,
        'accelerator': str,
        'log_level': str,
    }

    @classmethod
    def apply_overrides(cls, config: ExplorerConfig,
                        environ: Optional[Mapping[str, str]] = None) -> ExplorerConfig:
        """Override fields from FRACTAL_EXPLORER_<FIELD> variables."""
        environ = os.environ if environ is None else environ
        for name, convert in cls._conversions.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                value = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
            setattr(config, name, value)
            logger.debug(f"Environment override: {name}={value!r}")
        config.validate()
        return config


def load_config_from_args(config_file: Optional[str] = None,
                          environ: Optional[Mapping[str, str]] = None) -> ExplorerConfig:
    """Defaults, then ``config_file`` if given, then environment overrides."""
    manager = ConfigManager()
    config = manager.load_config(config_file) if config_file else manager.default_config()
    return EnvironmentConfig.apply_overrides(config, environ)
