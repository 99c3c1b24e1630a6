from .canvas import blend_pixels, fill_rect, new_canvas
from .draw_lines import clip_segment, draw_line, draw_polyline
from .draw_text import draw_text, text_size

__all__ = [
    "blend_pixels",
    "clip_segment",
    "draw_line",
    "draw_polyline",
    "draw_text",
    "fill_rect",
    "new_canvas",
    "text_size",
]
