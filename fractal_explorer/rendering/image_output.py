"""
Image export for rendered pixel buffers.

Writes PNG (with render metadata in text chunks), JPEG (with a companion
JSON metadata file) and TIFF images through Pillow.
"""

import numpy as np
from typing import Any, Dict, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin, TiffImagePlugin

from .. import __version__
from ..core.viewport import FractalVariant, ViewportModel

logger = logging.getLogger(__name__)

# TIFF ImageDescription tag
_TIFF_DESCRIPTION = 270
_TIFF_SOFTWARE = 305


@dataclass
class RenderMetadata:
    """Metadata for a rendered view."""

    variant: str
    center: Tuple[float, float]
    zoom: float
    resolution: Tuple[int, int]  # width, height
    max_iterations: int
    julia_c: Optional[Tuple[float, float]] = None
    render_time_seconds: float = 0.0
    timestamp: str = ""
    software_version: str = __version__
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    @classmethod
    def from_viewport(cls, viewport: ViewportModel, width: int, height: int,
                      render_time_seconds: float = 0.0) -> "RenderMetadata":
        julia_c = viewport.julia_c if viewport.variant is FractalVariant.JULIA else None
        return cls(
            variant=viewport.variant.value,
            center=viewport.center,
            zoom=viewport.zoom,
            resolution=(width, height),
            max_iterations=viewport.max_iterations(),
            julia_c=julia_c,
            render_time_seconds=render_time_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "RenderMetadata":
        data = json.loads(json_str)
        for key in ('center', 'resolution', 'julia_c'):
            if data.get(key) is not None:
                data[key] = tuple(data[key])
        return cls(**data)


class ImageExporter:
    """Saves RGB pixel buffers to image files."""

    def __init__(self):
        self.supported_formats = {
            '.png': self._save_png,
            '.tiff': self._save_tiff,
            '.tif': self._save_tiff,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, image_array: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> Path:
        """
        Save an RGB pixel buffer to file.

        Args:
            image_array: uint8 RGB array (height, width, 3)
            filepath: Output path; the suffix selects the format
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        if image_array.ndim != 3 or image_array.shape[2] != 3:
            raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")

        pil_image = Image.fromarray(np.ascontiguousarray(image_array, dtype=np.uint8))
        self.supported_formats[suffix](pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        pnginfo = PngImagePlugin.PngInfo()
        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.variant}")
            pnginfo.add_text("Software", f"FractalExplorer v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())
        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        tiffinfo = TiffImagePlugin.ImageFileDirectory_v2()
        if metadata:
            tiffinfo[_TIFF_DESCRIPTION] = metadata.to_json()
            tiffinfo[_TIFF_SOFTWARE] = f"FractalExplorer v{metadata.software_version}"
        pil_image.save(filepath, "TIFF", tiffinfo=tiffinfo, compression='tiff_lzw')

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        # JPEG has no room for structured metadata; write it alongside
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)
        if metadata:
            json_path = filepath.with_suffix('.json')
            json_path.write_text(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")


def read_png_metadata(filepath: Path) -> Optional[RenderMetadata]:
    """Read render metadata embedded by ImageExporter in a PNG file."""
    with Image.open(filepath) as img:
        text = getattr(img, 'text', {}) or {}
        raw = text.get("FractalMetadata")
    return RenderMetadata.from_json(raw) if raw else None
