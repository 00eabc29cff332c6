#!/usr/bin/env python3
"""
Example: design a small set of EQ sections and save each one.
"""

import logging

from pybiquad import BiquadSpec, design_raw, normalize
from pybiquad.rbj_cli import save_biquad, default_stem


PRESETS = [
    BiquadSpec('highpass', 48000, 30, q=0.7071),
    BiquadSpec('lowshelf', 48000, 120, gain_db=3.0, slope=1.0),
    BiquadSpec('bandshelf', 48000, 2800, gain_db=-2.5, bandwidth=1.5),
    BiquadSpec('highshelf', 48000, 10000, gain_db=1.5, slope=0.7),
]


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s'
    )
    log = logging.getLogger("presets")

    print("Designing EQ presets at 48 kHz...")
    print()

    for spec in PRESETS:
        raw = design_raw(spec)
        biquad = normalize(raw)
        b, a = biquad.ba()
        print(f"{spec.kind:<10} {spec.frequency:>7} Hz  b={b}  a={a}")
        save_biquad(default_stem(spec), spec, raw, biquad, log)


if __name__ == "__main__":
    main()
