from __future__ import annotations

import threading

from tailplot.config import PlotConfig
from tailplot.session import Session
from tailplot.targets.base import Renderer


_SESSION: Session | None = None
_SESSION_LOCK = threading.Lock()


def get_session(config: PlotConfig | None = None, renderer: Renderer | None = None) -> Session:
    """Return the process-wide session, building it on first use.

    ``config`` and ``renderer`` only take effect on the call that builds it.
    """
    global _SESSION
    with _SESSION_LOCK:
        if _SESSION is None:
            _SESSION = Session(config=config, renderer=renderer)
        return _SESSION
