"""Exception types raised by the wavelet engine.

Caller errors derive from ValueError so that code written against plain
numpy/pydantic validation keeps working:

- InvalidArgumentError: bad level count, bad level index, bad input rank
  or size, unknown wavelet, wrong number of subbands
- DimensionMismatchError: replacement coefficients of the wrong shape

BugEncounteredError signals a broken internal invariant (for example a
malformed pyramid reaching the synthesis filter bank). It is a
RuntimeError and should never be seen by a well-formed caller.
"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Argument outside the accepted domain."""


class DimensionMismatchError(ValueError):
    """Array shape does not match the shape it must replace or combine with."""


class BugEncounteredError(RuntimeError):
    """Internal bookkeeping produced an impossible state."""
