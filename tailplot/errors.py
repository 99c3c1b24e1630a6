from __future__ import annotations


class PlotApiError(ValueError):
    """A producer call was rejected; no state was changed."""


class InvalidIdentityError(PlotApiError):
    pass


class ArityConflictError(PlotApiError):
    pass


class MalformedLengthError(PlotApiError):
    pass


class PlotInputError(PlotApiError):
    pass


class SynchronizerFault(RuntimeError):
    """Validated update data turned out to be inconsistent while merging."""
