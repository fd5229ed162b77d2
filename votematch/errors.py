from __future__ import annotations

"""
Exception types raised by votematch.

Only :class:`ShapeMismatchError` escapes the scoring engine; every other
data problem inside the engine degrades to a neutral contribution.  The
request-level errors are raised by :mod:`votematch.service` and mapped
to HTTP status codes in :mod:`votematch.api`.
"""


class VoteMatchError(Exception):
    """Base class for all votematch errors."""


class ShapeMismatchError(VoteMatchError, ValueError):
    """Two embeddings of different length were compared."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Vectors must have the same length ({left} != {right})")
        self.left = left
        self.right = right


class MatchRequestError(VoteMatchError):
    """The match request carried no usable answers or too many of them."""


class NoCandidateDataError(VoteMatchError):
    """No candidate positions are available to match against."""


class SnapshotError(VoteMatchError):
    """A question or position snapshot could not be read."""
