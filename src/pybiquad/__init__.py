"""
Pybiquad - closed-form biquad coefficient design for audio EQ responses.
"""

from .biquad import RawCoefficients, NormalizedBiquad, normalize
from .rbj_gen import (
    BiquadSpec,
    FILTER_KINDS,
    design_biquad,
    design_raw,
    low_pass,
    high_pass,
    band_pass1,
    band_pass2,
    band_stop,
    low_shelf,
    high_shelf,
    high_shelf2,
    band_shelf,
    all_pass,
)

__version__ = "0.1.0"
__all__ = [
    "RawCoefficients",
    "NormalizedBiquad",
    "normalize",
    "BiquadSpec",
    "FILTER_KINDS",
    "design_biquad",
    "design_raw",
    "low_pass",
    "high_pass",
    "band_pass1",
    "band_pass2",
    "band_stop",
    "low_shelf",
    "high_shelf",
    "high_shelf2",
    "band_shelf",
    "all_pass",
]
