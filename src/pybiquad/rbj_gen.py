#!/usr/bin/env python3
"""
RBJ Cookbook Biquad Designer
============================

Closed-form second-order section design for the classic audio EQ responses
(Robert Bristow-Johnson's "Cookbook formulae for audio EQ biquad filter
coefficients"), plus the alternate linear-gain high shelf.

Every design runs the same way:
- angular frequency w0 = 2*pi*f/fs, its cosine and sine
- an alpha shape term from Q, bandwidth (octaves) or shelf slope
- a kind-specific combination into six raw coefficients
- division by a0 (see ``biquad.normalize``)

Parameters are never validated here. Frequencies at exactly 0 Hz or Nyquist,
zero Q and similar inputs give non-finite coefficients instead of errors;
the one exception is the band shelf, which asserts a finite alpha.

Arithmetic is float64 with IEEE semantics (numpy, errors ignored), so 0/0
and sinh overflow produce NaN/inf rather than Python exceptions.

Kind names used by the dispatch table:

    lowpass, highpass, bandpass1, bandpass2, bandstop,
    lowshelf, highshelf, highshelf2, bandshelf, allpass
"""

import functools
import logging
from dataclasses import dataclass, asdict, astuple
from typing import Optional, Dict, Any, Tuple

import numpy as np

from .biquad import RawCoefficients, NormalizedBiquad, normalize

log = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi
LN2 = np.log(2.0)

# Below this the linear-gain high shelf pins its corner frequency.
HIGH_SHELF2_MIN_FREQUENCY = 2.0


# ───────────────────────── Data structures ────────────────────────── #

@dataclass(frozen=True)
class BiquadSpec:
    """Design parameters for one section. Only the fields the kind uses matter."""
    kind: str
    sample_rate: float
    frequency: float
    q: Optional[float] = None
    bandwidth: Optional[float] = None  # octaves
    slope: Optional[float] = None
    gain_db: Optional[float] = None
    gain: Optional[float] = None  # linear, highshelf2 only

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'BiquadSpec':
        return cls(**d)

    def parameters(self) -> Dict[str, float]:
        """The parameters this kind actually reads, in call order."""
        _, names = _lookup(self.kind)
        return {name: getattr(self, name) for name in ('sample_rate', 'frequency') + names}


# ───────────────────────── scaffolding ────────────────────────── #

def _ieee(func):
    """Run a design formula on float64 with floating-point errors silenced."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with np.errstate(all="ignore"):
            raw = func(*(np.float64(a) for a in args),
                       **{k: np.float64(v) for k, v in kwargs.items()})
        return RawCoefficients(*(float(c) for c in astuple(raw)))
    return wrapper


def angular_frequency(sample_rate: float, frequency: float) -> float:
    return TWO_PI * frequency / sample_rate


def alpha_from_q(sn: float, q: float) -> float:
    return sn / (2 * q)


def alpha_from_bandwidth(w0: float, sn: float, bandwidth: float) -> float:
    """
    Bandwidth in octaves, measured between the -3 dB points.

    Divides by sin(w0): NaN at 0 Hz, inf at Nyquist.
    """
    return sn * np.sinh(LN2 / 2 * bandwidth * w0 / sn)


def alpha_from_slope(sn: float, amplitude: float, slope: float) -> float:
    # slope = 1 is the steepest shelf that stays monotonic
    return sn / 2 * np.sqrt((amplitude + 1 / amplitude) * (1 / slope - 1) + 2)


def db_to_amplitude(gain_db: float) -> float:
    """Square root of the linear gain, the 'A' of the shelving formulas."""
    return 10.0 ** (gain_db / 40)


# ─────────────────────── per-kind formulas ─────────────────────── #

@_ieee
def raw_low_pass(sample_rate, cutoff_frequency, q) -> RawCoefficients:
    w0 = angular_frequency(sample_rate, cutoff_frequency)
    cs = np.cos(w0)
    al = alpha_from_q(np.sin(w0), q)
    return RawCoefficients(
        b0=(1 - cs) / 2,
        b1=1 - cs,
        b2=(1 - cs) / 2,
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


@_ieee
def raw_high_pass(sample_rate, cutoff_frequency, q) -> RawCoefficients:
    w0 = angular_frequency(sample_rate, cutoff_frequency)
    cs = np.cos(w0)
    al = alpha_from_q(np.sin(w0), q)
    return RawCoefficients(
        b0=(1 + cs) / 2,
        b1=-(1 + cs),
        b2=(1 + cs) / 2,
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


@_ieee
def raw_band_pass1(sample_rate, center_frequency, bandwidth) -> RawCoefficients:
    """
    Constant skirt gain band-pass (peak gain = Q).

    NOTE: ``bandwidth`` is used as a Q value here, not as octaves like
    ``raw_band_pass2`` and ``raw_band_stop``. b0 = bandwidth*alpha reduces to
    sin(w0)/2. For a bandwidth in octaves use band-pass 2.
    """
    w0 = angular_frequency(sample_rate, center_frequency)
    cs = np.cos(w0)
    al = alpha_from_q(np.sin(w0), bandwidth)
    return RawCoefficients(
        b0=bandwidth * al,
        b1=np.float64(0.0),
        b2=-bandwidth * al,
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


@_ieee
def raw_band_pass2(sample_rate, center_frequency, bandwidth) -> RawCoefficients:
    """Constant 0 dB peak gain band-pass, bandwidth in octaves."""
    w0 = angular_frequency(sample_rate, center_frequency)
    cs = np.cos(w0)
    al = alpha_from_bandwidth(w0, np.sin(w0), bandwidth)
    return RawCoefficients(
        b0=al,
        b1=np.float64(0.0),
        b2=-al,
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


@_ieee
def raw_band_stop(sample_rate, center_frequency, bandwidth) -> RawCoefficients:
    w0 = angular_frequency(sample_rate, center_frequency)
    cs = np.cos(w0)
    al = alpha_from_bandwidth(w0, np.sin(w0), bandwidth)
    return RawCoefficients(
        b0=np.float64(1.0),
        b1=-2 * cs,
        b2=np.float64(1.0),
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


@_ieee
def raw_low_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope) -> RawCoefficients:
    A = db_to_amplitude(gain_db)
    w0 = angular_frequency(sample_rate, cutoff_frequency)
    cs = np.cos(w0)
    al = alpha_from_slope(np.sin(w0), A, shelf_slope)
    sq = 2 * np.sqrt(A) * al
    return RawCoefficients(
        b0=A * ((A + 1) - (A - 1) * cs + sq),
        b1=2 * A * ((A - 1) - (A + 1) * cs),
        b2=A * ((A + 1) - (A - 1) * cs - sq),
        a0=(A + 1) + (A - 1) * cs + sq,
        a1=-2 * ((A - 1) + (A + 1) * cs),
        a2=(A + 1) + (A - 1) * cs - sq,
    )


@_ieee
def raw_high_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope) -> RawCoefficients:
    A = db_to_amplitude(gain_db)
    w0 = angular_frequency(sample_rate, cutoff_frequency)
    cs = np.cos(w0)
    al = alpha_from_slope(np.sin(w0), A, shelf_slope)
    sq = 2 * np.sqrt(A) * al
    return RawCoefficients(
        b0=A * ((A + 1) + (A - 1) * cs + sq),
        b1=-2 * A * ((A - 1) + (A + 1) * cs),
        b2=A * ((A + 1) + (A - 1) * cs - sq),
        a0=(A + 1) - (A - 1) * cs + sq,
        a1=2 * ((A - 1) - (A + 1) * cs),
        a2=(A + 1) - (A - 1) * cs - sq,
    )


@_ieee
def raw_high_shelf2(sample_rate, cutoff_frequency, gain, q) -> RawCoefficients:
    """
    High shelf with a linear gain and Q instead of dB and slope.

    Negative gains clamp to 0 and the corner frequency is floored at 2 Hz.
    """
    A = max(np.float64(0.0), gain)
    aminus1 = A - 1
    aplus1 = A + 1
    w0 = angular_frequency(sample_rate, max(cutoff_frequency, np.float64(HIGH_SHELF2_MIN_FREQUENCY)))
    cs = np.cos(w0)
    beta = np.sin(w0) * np.sqrt(A) / q
    return RawCoefficients(
        b0=A * (aplus1 + aminus1 * cs + beta),
        b1=A * -2 * (aminus1 + aplus1 * cs),
        b2=A * (aplus1 + aminus1 * cs - beta),
        a0=aplus1 - aminus1 * cs + beta,
        a1=2 * (aminus1 - aplus1 * cs),
        a2=aplus1 - aminus1 * cs - beta,
    )


@_ieee
def raw_band_shelf(sample_rate, center_frequency, gain_db, bandwidth) -> RawCoefficients:
    """Peaking EQ, bandwidth in octaves."""
    A = db_to_amplitude(gain_db)
    w0 = angular_frequency(sample_rate, center_frequency)
    cs = np.cos(w0)
    al = alpha_from_bandwidth(w0, np.sin(w0), bandwidth)
    assert np.isfinite(al), (f"band shelf alpha is {al} "
                             f"(f={center_frequency} Hz, fs={sample_rate} Hz)")
    return RawCoefficients(
        b0=1 + al * A,
        b1=-2 * cs,
        b2=1 - al * A,
        a0=1 + al / A,
        a1=-2 * cs,
        a2=1 - al / A,
    )


@_ieee
def raw_all_pass(sample_rate, phase_frequency, q) -> RawCoefficients:
    w0 = angular_frequency(sample_rate, phase_frequency)
    cs = np.cos(w0)
    al = alpha_from_q(np.sin(w0), q)
    return RawCoefficients(
        b0=1 - al,
        b1=-2 * cs,
        b2=1 + al,
        a0=1 + al,
        a1=-2 * cs,
        a2=1 - al,
    )


# ──────────────────── normalized designs ──────────────────── #

def low_pass(sample_rate, cutoff_frequency, q) -> NormalizedBiquad:
    return normalize(raw_low_pass(sample_rate, cutoff_frequency, q))


def high_pass(sample_rate, cutoff_frequency, q) -> NormalizedBiquad:
    return normalize(raw_high_pass(sample_rate, cutoff_frequency, q))


def band_pass1(sample_rate, center_frequency, bandwidth) -> NormalizedBiquad:
    return normalize(raw_band_pass1(sample_rate, center_frequency, bandwidth))


def band_pass2(sample_rate, center_frequency, bandwidth) -> NormalizedBiquad:
    return normalize(raw_band_pass2(sample_rate, center_frequency, bandwidth))


def band_stop(sample_rate, center_frequency, bandwidth) -> NormalizedBiquad:
    return normalize(raw_band_stop(sample_rate, center_frequency, bandwidth))


def low_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope) -> NormalizedBiquad:
    return normalize(raw_low_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope))


def high_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope) -> NormalizedBiquad:
    return normalize(raw_high_shelf(sample_rate, cutoff_frequency, gain_db, shelf_slope))


def high_shelf2(sample_rate, cutoff_frequency, gain, q) -> NormalizedBiquad:
    return normalize(raw_high_shelf2(sample_rate, cutoff_frequency, gain, q))


def band_shelf(sample_rate, center_frequency, gain_db, bandwidth) -> NormalizedBiquad:
    return normalize(raw_band_shelf(sample_rate, center_frequency, gain_db, bandwidth))


def all_pass(sample_rate, phase_frequency, q) -> NormalizedBiquad:
    return normalize(raw_all_pass(sample_rate, phase_frequency, q))


# ─────────────────────── dispatch ─────────────────────── #

# kind -> (raw formula, extra BiquadSpec fields after sample_rate, frequency)
KIND_PARAMETERS = {
    'lowpass':    (raw_low_pass,    ('q',)),
    'highpass':   (raw_high_pass,   ('q',)),
    'bandpass1':  (raw_band_pass1,  ('bandwidth',)),
    'bandpass2':  (raw_band_pass2,  ('bandwidth',)),
    'bandstop':   (raw_band_stop,   ('bandwidth',)),
    'lowshelf':   (raw_low_shelf,   ('gain_db', 'slope')),
    'highshelf':  (raw_high_shelf,  ('gain_db', 'slope')),
    'highshelf2': (raw_high_shelf2, ('gain', 'q')),
    'bandshelf':  (raw_band_shelf,  ('gain_db', 'bandwidth')),
    'allpass':    (raw_all_pass,    ('q',)),
}

FILTER_KINDS = tuple(KIND_PARAMETERS)


def _lookup(kind: str) -> Tuple[Any, Tuple[str, ...]]:
    try:
        return KIND_PARAMETERS[kind]
    except KeyError:
        raise ValueError(f"Unsupported filter kind: {kind}") from None


def design_raw(spec: BiquadSpec) -> RawCoefficients:
    """Evaluate the formula for ``spec.kind`` without normalizing."""
    formula, names = _lookup(spec.kind)
    missing = [name for name in names if getattr(spec, name) is None]
    if missing:
        raise ValueError(f"{spec.kind} needs {', '.join(missing)}")

    raw = formula(*spec.parameters().values())
    log.debug("%s raw: %s", spec.kind, raw)
    return raw


def design_biquad(spec: BiquadSpec) -> NormalizedBiquad:
    """Design one normalized section from ``spec``."""
    return normalize(design_raw(spec))
