#!/usr/bin/env python3
"""
Biquad coefficient designer – command line
==========================================

Designs one RBJ cookbook section, prints the coefficients and saves them.

CLI examples
------------
# Butterworth-Q low-pass at 1 kHz:
python3 -m pybiquad.rbj_cli --kind lowpass --rate 48000 --freq 1000 --q 0.7071

# +6 dB low shelf, slope 1:
python3 -m pybiquad.rbj_cli --kind lowshelf --freq 120 --gain-db 6 --slope 1

# One-octave peaking band at 3 kHz, print only:
python3 -m pybiquad.rbj_cli --kind bandshelf --freq 3000 --gain-db -4 \
    --bandwidth 1 --no-save

# Re-check a saved design against a fresh one:
python3 -m pybiquad.rbj_cli --analyze lowpass_48000Hz_1000Hz.npz
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, List, Tuple

import numpy as np

from .biquad import RawCoefficients, NormalizedBiquad, normalize
from .rbj_gen import BiquadSpec, FILTER_KINDS, KIND_PARAMETERS, design_raw

# BiquadSpec field -> command line flag
PARAM_FLAGS = {
    'q': '--q',
    'bandwidth': '--bandwidth',
    'slope': '--slope',
    'gain_db': '--gain-db',
    'gain': '--gain',
}


# ───────────────────────── helpers ────────────────────────── #

def check_ranges(spec: BiquadSpec, log: logging.Logger) -> None:
    """Warn about inputs the designer will happily turn into garbage."""
    nyq = spec.sample_rate / 2
    if not spec.sample_rate > 0:
        log.warning("Sample rate %.1f Hz is not positive", spec.sample_rate)
    elif not 0 < spec.frequency < nyq:
        log.warning("Frequency %.3f Hz is outside (0, %.1f) Hz; "
                    "coefficients may be aliased or non-finite", spec.frequency, nyq)

    for name in ('q', 'bandwidth', 'slope'):
        value = getattr(spec, name)
        if name in KIND_PARAMETERS[spec.kind][1] and not value > 0:
            log.warning("%s = %g should be strictly positive", name, value)

    if spec.kind == 'highshelf2' and spec.gain < 0:
        log.warning("Linear gain %g will be clamped to 0", spec.gain)


def default_stem(spec: BiquadSpec) -> str:
    return f"{spec.kind}_{spec.sample_rate:g}Hz_{spec.frequency:g}Hz"


def print_biquad_report(spec: BiquadSpec, raw: RawCoefficients,
                        biquad: NormalizedBiquad) -> None:
    print("\n" + "=" * 60)
    print("BIQUAD DESIGN REPORT")
    print("=" * 60)

    print("\nParameters")
    print("-" * 20)
    print(f"Kind           : {spec.kind}")
    for name, value in spec.parameters().items():
        print(f"{name:<15}: {value}")

    print("\nRaw coefficients")
    print("-" * 20)
    for name, value in zip(('b0', 'b1', 'b2', 'a0', 'a1', 'a2'), raw.as_array()):
        print(f"{name}             : {value:.18e}")

    print("\nNormalized coefficients (a0 = 1)")
    print("-" * 20)
    for name, value in zip(('b0', 'b1', 'b2', 'a0', 'a1', 'a2'), biquad.as_array()):
        print(f"{name}             : {value:.18e}")

    if not biquad.is_finite():
        print("\n⚠️  Coefficients are NOT finite - do not load this section.")


def save_biquad(stem: str, spec: BiquadSpec, raw: RawCoefficients,
                biquad: NormalizedBiquad, log: logging.Logger) -> None:
    """Write ``<stem>.txt`` (b0 b1 b2 a0 a1 a2) and ``<stem>.npz`` with metadata."""
    txt = Path(stem + ".txt")
    np.savetxt(txt, biquad.as_array(), fmt="%.18e")

    np.savez(stem + ".npz",
             coefficients=biquad.as_array(),
             raw=raw.as_array(),
             spec=spec.to_dict(),
             command_line=' '.join(sys.argv))

    log.info("Saved %s.txt and %s.npz", stem, stem)


def analyze_saved_biquad(npz_path: Path, log: Optional[logging.Logger] = None) -> bool:
    """Re-design a saved section and check the stored coefficients match exactly."""
    if log is None:
        log = logging.getLogger("analyze")

    log.info("Loading biquad from %s...", npz_path)
    with np.load(npz_path, allow_pickle=True) as data:
        stored = data['coefficients']
        spec = BiquadSpec.from_dict(data['spec'].item())

    raw = design_raw(spec)
    biquad = normalize(raw)
    print_biquad_report(spec, raw, biquad)

    ok = np.array_equal(stored, biquad.as_array(), equal_nan=True)
    if ok:
        log.info("Stored coefficients match a fresh design")
    else:
        log.error("Stored coefficients differ from a fresh design: max |diff| = %.3e",
                  np.nanmax(np.abs(stored - biquad.as_array())))
    return ok


# ─────────────────────────── CLI ──────────────────────────── #

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="RBJ cookbook biquad coefficient designer.",
    )

    mode_group = p.add_mutually_exclusive_group()
    mode_group.add_argument("--kind", choices=FILTER_KINDS,
                            help="Filter response to design.")
    mode_group.add_argument("--analyze", type=Path,
                            help="Re-check an existing .npz design instead of designing.")

    g = p.add_argument_group("Design")
    g.add_argument("--rate", type=float, default=44_100,
                   help="Sample rate Fs (Hz).")
    g.add_argument("--freq", type=float,
                   help="Cutoff, center, corner or phase frequency (Hz).")
    g.add_argument("--q", type=float,
                   help="Quality factor (lowpass, highpass, allpass, highshelf2). "
                        "bandpass1 takes its width through --bandwidth but treats it as Q.")
    g.add_argument("--bandwidth", type=float,
                   help="Bandwidth in octaves (bandpass2, bandstop, bandshelf).")
    g.add_argument("--slope", type=float,
                   help="Shelf slope; 1 is the steepest monotonic shelf (lowshelf, highshelf).")
    g.add_argument("--gain-db", type=float,
                   help="Gain in dB (lowshelf, highshelf, bandshelf).")
    g.add_argument("--gain", type=float,
                   help="Linear gain, negative values clamp to 0 (highshelf2).")

    g = p.add_argument_group("Output")
    g.add_argument("--basename",
                   help="Filename stem for outputs. Default: '<kind>_<rate>Hz_<freq>Hz'.")
    g.add_argument("--no-save", action="store_true",
                   help="Print the coefficients without writing files.")

    g = p.add_argument_group("Misc")
    g.add_argument("--debug", action="store_true",
                   help="Enable DEBUG-level logging for extra detail.")
    g.add_argument("--log-file", type=str,
                   help="Also write log output to this file.")
    return p


def setup_logging(debug: bool, log_file: Optional[str]) -> Tuple[logging.Logger, List[logging.Handler]]:
    log_handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_format = "%(asctime)s - %(levelname)s - %(message)s"
        log_handlers.append(logging.FileHandler(log_file, mode='w'))
    else:
        log_format = "%(levelname)s %(message)s"

    logging.basicConfig(
        handlers=log_handlers,
        level=logging.DEBUG if debug else logging.INFO,
        format=log_format,
        force=True,
    )
    return logging.getLogger("biquad"), log_handlers


def close_logging(handlers: List[logging.Handler]) -> None:
    root = logging.getLogger()
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()


def main(argv: Optional[List[str]] = None) -> None:
    p = build_parser()
    a = p.parse_args(argv)

    log, handlers = setup_logging(a.debug, a.log_file)
    try:
        run(p, a, log)
    finally:
        close_logging(handlers)


def run(p: argparse.ArgumentParser, a: argparse.Namespace, log: logging.Logger) -> None:
    if a.log_file:
        log.info("Logging to file: %s", a.log_file)

    if a.analyze:
        ok = analyze_saved_biquad(a.analyze, log)
        sys.exit(0 if ok else 1)

    if not a.kind:
        p.error("Must specify either --kind or --analyze")
    if a.freq is None:
        p.error("--freq is required for filter design")

    spec = BiquadSpec(
        kind=a.kind,
        sample_rate=a.rate,
        frequency=a.freq,
        q=a.q,
        bandwidth=a.bandwidth,
        slope=a.slope,
        gain_db=a.gain_db,
        gain=a.gain,
    )

    missing = [PARAM_FLAGS[name] for name in KIND_PARAMETERS[a.kind][1]
               if getattr(spec, name) is None]
    if missing:
        p.error(f"--kind {a.kind} requires {', '.join(missing)}")

    check_ranges(spec, log)

    raw = design_raw(spec)
    biquad = normalize(raw)
    print_biquad_report(spec, raw, biquad)

    if not biquad.is_finite():
        log.error("Design is degenerate; nothing saved")
        sys.exit(1)

    if not a.no_save:
        save_biquad(a.basename or default_stem(spec), spec, raw, biquad, log)


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logging.error("Fatal: %s", e)
        logging.debug("Traceback:", exc_info=True)
        sys.exit(1)
