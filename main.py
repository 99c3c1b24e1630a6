from __future__ import annotations

import argparse
from dataclasses import replace
import logging
import math
from pathlib import Path
import threading
import time

from tailplot import PlotConfig, RasterRenderer, Session, load_config


LOGGER = logging.getLogger("tailplot.demo")


def _produce(session: Session, series_id: int, samples: int, interval_s: float) -> None:
    phase = series_id * 0.7
    for i in range(samples):
        t = i * 0.05
        session.append_point(series_id, t, math.sin(t + phase) * (1.0 + 0.2 * series_id))
        if interval_s > 0:
            time.sleep(interval_s)


def run_demo(args: argparse.Namespace) -> Path:
    config = load_config(args.config) if args.config is not None else PlotConfig()
    config = replace(config, window_width=args.width, window_height=args.height)
    renderer = RasterRenderer()
    session = Session(config=config, renderer=renderer, start_render_thread=False)

    for series_id in range(args.series):
        session.set_name(series_id, f"sine {series_id}")
        session.group_add(0, series_id)
    session.group_set_name(0, "demo")
    if args.tail is not None:
        session.set_mode_tail_count(args.tail)

    producers = [
        threading.Thread(target=_produce, args=(session, i, args.samples, args.interval), name=f"producer-{i}")
        for i in range(args.series)
    ]
    for thread in producers:
        thread.start()
    for thread in producers:
        thread.join()

    # Frames are driven on this thread so the output is deterministic.
    session.group_show(0)
    for _ in range(args.frames):
        session.render_loop.run_frame()
    out = renderer.save_png(args.out)
    LOGGER.info("wrote %s after %d frames", out, session.render_loop.frames_rendered)
    return out


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="tailplot")
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("run-demo", help="Stream synthetic series into a headless session and save a PNG.")
    demo.add_argument("--series", type=int, default=3)
    demo.add_argument("--samples", type=int, default=400)
    demo.add_argument("--interval", type=float, default=0.0, help="Producer sleep between samples (seconds).")
    demo.add_argument("--frames", type=int, default=2)
    demo.add_argument("--tail", type=int, default=None, help="Show only the last N samples of each series.")
    demo.add_argument("--width", type=int, default=650)
    demo.add_argument("--height", type=int, default=500)
    demo.add_argument("--config", type=Path, default=None, help="Optional TOML plot config.")
    demo.add_argument("--out", type=Path, default=Path("tailplot_demo.png"))
    demo.add_argument("--log-level", default="INFO")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))

    if args.command == "run-demo":
        if args.series <= 0 or args.series > 64:
            raise SystemExit("--series must be in [1, 64]")
        if args.frames <= 0:
            raise SystemExit("--frames must be > 0")
        run_demo(args)
        return

    raise SystemExit(f"unsupported command: {args.command}")


if __name__ == "__main__":
    main()
