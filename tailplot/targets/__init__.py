from .base import Renderer
from .raster_target import RasterRenderer

__all__ = ["RasterRenderer", "Renderer"]
