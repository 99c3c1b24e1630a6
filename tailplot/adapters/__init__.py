from .normalize import coerce_points, coerce_samples, coerce_scalar, split_interleaved

__all__ = [
    "coerce_points",
    "coerce_samples",
    "coerce_scalar",
    "split_interleaved",
]
