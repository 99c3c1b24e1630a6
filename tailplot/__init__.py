from tailplot.api import get_session
from tailplot.config import PlotConfig, load_config
from tailplot.errors import (
    ArityConflictError,
    InvalidIdentityError,
    MalformedLengthError,
    PlotApiError,
    PlotInputError,
    SynchronizerFault,
)
from tailplot.geometry import Point, Range, Rect
from tailplot.session import Session
from tailplot.targets import RasterRenderer, Renderer
from tailplot.viewport import PointerInput

__all__ = [
    "ArityConflictError",
    "InvalidIdentityError",
    "MalformedLengthError",
    "PlotApiError",
    "PlotConfig",
    "PlotInputError",
    "Point",
    "PointerInput",
    "Range",
    "RasterRenderer",
    "Rect",
    "Renderer",
    "Session",
    "SynchronizerFault",
    "get_session",
    "load_config",
]
