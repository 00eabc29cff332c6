#!/usr/bin/env python3
"""
Biquad coefficient containers and normalization.

A section is stored as six real values (b0, b1, b2, a0, a1, a2). The
normalized form has a0 = 1 and is what a direct-form evaluator of

    y[n] = b0*x[n] + b1*x[n-1] + b2*x[n-2] - a1*y[n-1] - a2*y[n-2]

consumes. Degenerate designs are never rejected here: their coefficients
come out non-finite and the caller decides what to do with them.
"""

import logging
from dataclasses import dataclass, astuple
from typing import Tuple

import numpy as np

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawCoefficients:
    """Coefficients exactly as a design formula produced them."""
    b0: float
    b1: float
    b2: float
    a0: float
    a1: float
    a2: float

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=np.float64)


@dataclass(frozen=True)
class NormalizedBiquad:
    """
    Canonical biquad section with a0 = 1.

    ``as_array()`` uses the second-order-section row layout
    ``[b0, b1, b2, a0, a1, a2]``, so a stack of these can be fed straight to
    ``scipy.signal.sosfilt``.
    """
    b0: float
    b1: float
    b2: float
    a0: float
    a1: float
    a2: float

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=np.float64)

    def ba(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(b, a)`` transfer-function arrays."""
        c = self.as_array()
        return c[:3], c[3:]

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.as_array())))


def normalize(raw: RawCoefficients) -> NormalizedBiquad:
    """
    Divide all six coefficients by a0.

    A zero a0 produces inf/NaN through the division itself. A non-finite a0
    (alpha overflowed or is NaN) would otherwise leave some terms at a
    harmless-looking 0, so the whole section is set to NaN instead.
    """
    coeffs = raw.as_array()
    a0 = coeffs[3]

    with np.errstate(all="ignore"):
        scaled = coeffs / a0

    if not np.isfinite(a0):
        scaled = np.full(6, np.nan)

    if not np.all(np.isfinite(scaled)):
        log.warning("Degenerate biquad: raw a0=%r gives non-finite coefficients %s",
                    float(a0), scaled)

    return NormalizedBiquad(*(float(c) for c in scaled))
