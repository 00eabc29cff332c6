#!/usr/bin/env python3
"""
Checks for the RBJ cookbook designs: reference values, response shape at the
frequencies each formula promises, and the degenerate-input behaviour.
"""

import math

import numpy as np
import pytest
from scipy import signal

from pybiquad import (
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
from pybiquad.rbj_gen import raw_low_pass, raw_band_shelf, alpha_from_bandwidth

FS = 44100.0

TYPICAL_SPECS = [
    BiquadSpec('lowpass', FS, 1000.0, q=0.707),
    BiquadSpec('highpass', FS, 1000.0, q=0.707),
    BiquadSpec('bandpass1', FS, 2500.0, bandwidth=2.0),
    BiquadSpec('bandpass2', FS, 2500.0, bandwidth=1.0),
    BiquadSpec('bandstop', FS, 2500.0, bandwidth=0.5),
    BiquadSpec('lowshelf', FS, 200.0, gain_db=6.0, slope=1.0),
    BiquadSpec('highshelf', FS, 8000.0, gain_db=-9.0, slope=0.5),
    BiquadSpec('highshelf2', FS, 8000.0, gain=1.5, q=0.707),
    BiquadSpec('bandshelf', FS, 3000.0, gain_db=4.0, bandwidth=1.0),
    BiquadSpec('allpass', FS, 1000.0, q=2.0),
]


def response(biquad, w):
    """H(e^jw) evaluated straight from the transfer function."""
    z1 = np.exp(-1j * np.asarray(w))
    b, a = biquad.ba()
    return (b[0] + b[1] * z1 + b[2] * z1**2) / (a[0] + a[1] * z1 + a[2] * z1**2)


def w0(sample_rate, frequency):
    return 2 * np.pi * frequency / sample_rate


# ───────────────────────── normalization ────────────────────────── #

def test_every_kind_is_covered():
    assert sorted(spec.kind for spec in TYPICAL_SPECS) == sorted(FILTER_KINDS)


@pytest.mark.parametrize("spec", TYPICAL_SPECS, ids=lambda s: s.kind)
def test_leading_denominator_is_exactly_one(spec):
    biquad = design_biquad(spec)
    assert biquad.a0 == 1.0
    assert biquad.is_finite()


@pytest.mark.parametrize("spec", TYPICAL_SPECS, ids=lambda s: s.kind)
def test_normalized_is_raw_divided_by_a0(spec):
    raw = design_raw(spec).as_array()
    np.testing.assert_allclose(design_biquad(spec).as_array(), raw / raw[3], rtol=1e-15)


@pytest.mark.parametrize("spec", TYPICAL_SPECS, ids=lambda s: s.kind)
def test_design_is_bit_identical_on_repeat(spec):
    first = design_biquad(spec).as_array()
    second = design_biquad(spec).as_array()
    assert first.tobytes() == second.tobytes()


@pytest.mark.parametrize("spec", TYPICAL_SPECS, ids=lambda s: s.kind)
def test_direct_response_agrees_with_scipy(spec):
    biquad = design_biquad(spec)
    w, h = signal.freqz(*biquad.ba(), worN=512)
    np.testing.assert_allclose(response(biquad, w), h, rtol=1e-9, atol=1e-12)


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError, match="Unsupported filter kind"):
        design_biquad(BiquadSpec('peaking', FS, 1000.0, q=1.0))


def test_missing_parameter_is_reported():
    with pytest.raises(ValueError, match="gain_db"):
        design_biquad(BiquadSpec('lowshelf', FS, 1000.0, slope=1.0))


def test_spec_round_trips_through_dict():
    spec = TYPICAL_SPECS[-2]
    assert BiquadSpec.from_dict(spec.to_dict()) == spec


def test_spec_parameters_follow_call_order():
    spec = BiquadSpec('bandshelf', FS, 3000.0, gain_db=4.0, bandwidth=1.0, q=9.0)
    assert list(spec.parameters()) == ['sample_rate', 'frequency', 'gain_db', 'bandwidth']


def test_dispatch_matches_direct_call():
    spec = BiquadSpec('highshelf', FS, 8000.0, gain_db=-9.0, slope=0.5)
    assert design_biquad(spec) == high_shelf(FS, 8000.0, -9.0, 0.5)


def test_formulas_accept_keyword_arguments():
    by_name = raw_low_pass(sample_rate=44100, cutoff_frequency=1000, q=0.7)
    assert by_name.as_array().tobytes() == raw_low_pass(44100, 1000, 0.7).as_array().tobytes()

    mixed = raw_band_shelf(FS, 3000.0, bandwidth=1.0, gain_db=4.0)
    assert mixed == raw_band_shelf(FS, 3000.0, 4.0, 1.0)


@pytest.mark.parametrize("spec", TYPICAL_SPECS, ids=lambda s: s.kind)
def test_raw_coefficients_are_plain_floats(spec):
    raw = design_raw(spec)
    assert all(type(getattr(raw, name)) is float for name in ("b0", "b1", "b2", "a0", "a1", "a2"))


# ───────────────────────── low / high pass ────────────────────────── #

def test_low_pass_reference_vector():
    q = 0.7071067811865476
    raw = raw_low_pass(FS, 11025.0, q)
    np.testing.assert_allclose(
        raw.as_array(),
        [0.5, 1.0, 0.5, 1.70710678, 0.0, 0.29289322],
        rtol=1e-8, atol=1e-12,
    )

    biquad = low_pass(FS, 11025.0, q)
    assert biquad.a0 == 1.0
    assert biquad.b0 == pytest.approx(0.29289322, abs=1e-8)
    assert biquad.b1 == pytest.approx(0.58578644, abs=1e-8)
    assert biquad.b2 == pytest.approx(0.29289322, abs=1e-8)
    assert biquad.a1 == pytest.approx(0.0, abs=1e-15)
    assert biquad.a2 == pytest.approx(0.17157288, abs=1e-8)


def test_low_pass_has_unity_dc_and_nyquist_zero():
    biquad = low_pass(FS, 1000.0, 0.707)
    assert abs(response(biquad, 0.0)) == pytest.approx(1.0, abs=1e-12)
    assert abs(response(biquad, np.pi)) == pytest.approx(0.0, abs=1e-12)


def test_high_pass_has_unity_nyquist_and_dc_zero():
    biquad = high_pass(FS, 1000.0, 0.707)
    assert abs(response(biquad, np.pi)) == pytest.approx(1.0, abs=1e-12)
    assert abs(response(biquad, 0.0)) == pytest.approx(0.0, abs=1e-12)


def test_butterworth_q_is_3db_down_at_cutoff():
    biquad = low_pass(48000.0, 2000.0, 1 / math.sqrt(2))
    gain = abs(response(biquad, w0(48000.0, 2000.0)))
    assert 20 * np.log10(gain) == pytest.approx(-3.0103, abs=1e-3)


# ───────────────────────── band pass / stop ────────────────────────── #

def test_band_pass1_keeps_bandwidth_as_q_behaviour():
    # numerator reduces to sin(w0)/2 whatever the bandwidth
    w = w0(FS, 2500.0)
    for bandwidth in (0.5, 2.0, 7.0):
        biquad = band_pass1(FS, 2500.0, bandwidth)
        alpha = math.sin(w) / (2 * bandwidth)
        assert biquad.b0 == pytest.approx(math.sin(w) / 2 / (1 + alpha), rel=1e-12)
        assert biquad.b1 == 0.0
        assert biquad.b2 == pytest.approx(-biquad.b0, rel=1e-15)


def test_band_pass1_peak_gain_equals_its_q():
    biquad = band_pass1(FS, 2500.0, 4.0)
    assert abs(response(biquad, w0(FS, 2500.0))) == pytest.approx(4.0, rel=1e-9)


@pytest.mark.parametrize("bandwidth", [0.25, 1.0, 3.0])
def test_band_pass2_has_0db_peak(bandwidth):
    biquad = band_pass2(FS, 2500.0, bandwidth)
    assert abs(response(biquad, w0(FS, 2500.0))) == pytest.approx(1.0, rel=1e-9)


def test_band_stop_nulls_center_and_passes_edges():
    biquad = band_stop(FS, 2500.0, 1.0)
    assert abs(response(biquad, w0(FS, 2500.0))) == pytest.approx(0.0, abs=1e-9)
    assert abs(response(biquad, 0.0)) == pytest.approx(1.0, abs=1e-12)
    assert abs(response(biquad, np.pi)) == pytest.approx(1.0, abs=1e-12)


# ───────────────────────── shelves ────────────────────────── #

@pytest.mark.parametrize("gain_db", [-12.0, 3.0, 9.5])
def test_low_shelf_gain_at_dc(gain_db):
    biquad = low_shelf(FS, 300.0, gain_db, 1.0)
    assert abs(response(biquad, 0.0)) == pytest.approx(10 ** (gain_db / 20), rel=1e-9)
    assert abs(response(biquad, np.pi)) == pytest.approx(1.0, rel=1e-9)


@pytest.mark.parametrize("gain_db", [-12.0, 3.0, 9.5])
def test_high_shelf_gain_at_nyquist(gain_db):
    biquad = high_shelf(FS, 5000.0, gain_db, 0.8)
    assert abs(response(biquad, np.pi)) == pytest.approx(10 ** (gain_db / 20), rel=1e-9)
    assert abs(response(biquad, 0.0)) == pytest.approx(1.0, rel=1e-9)


def test_zero_db_shelves_are_transparent():
    w = np.linspace(0, np.pi, 64)
    for biquad in (low_shelf(FS, 300.0, 0.0, 1.0), high_shelf(FS, 5000.0, 0.0, 1.0)):
        np.testing.assert_allclose(np.abs(response(biquad, w)), 1.0, rtol=1e-12)


def test_high_shelf2_gain_is_amplitude():
    # the linear gain enters as A, so the top shelf sits at gain**2
    biquad = high_shelf2(FS, 1000.0, 2.0, 0.707)
    assert abs(response(biquad, np.pi)) == pytest.approx(4.0, rel=1e-9)
    assert abs(response(biquad, 0.0)) == pytest.approx(1.0, rel=1e-9)


def test_high_shelf2_clamps_negative_gain():
    clamped = high_shelf2(FS, 1000.0, -5.0, 0.707)
    zero = high_shelf2(FS, 1000.0, 0.0, 0.707)
    assert clamped.as_array().tobytes() == zero.as_array().tobytes()


@pytest.mark.parametrize("frequency", [1.999, 1.0, 0.0, -40.0])
def test_high_shelf2_floors_frequency_at_2hz(frequency):
    floored = high_shelf2(FS, frequency, 1.5, 0.707)
    at_two = high_shelf2(FS, 2.0, 1.5, 0.707)
    assert floored.as_array().tobytes() == at_two.as_array().tobytes()


@pytest.mark.parametrize("gain_db", [-6.0, 0.0, 7.5])
def test_band_shelf_gain_at_center(gain_db):
    biquad = band_shelf(FS, 3000.0, gain_db, 1.0)
    assert abs(response(biquad, w0(FS, 3000.0))) == pytest.approx(10 ** (gain_db / 20), rel=1e-9)
    assert abs(response(biquad, 0.0)) == pytest.approx(1.0, rel=1e-9)


# ───────────────────────── all pass ────────────────────────── #

@pytest.mark.parametrize("fs,f,q", [
    (44100.0, 1000.0, 0.707),
    (48000.0, 50.0, 0.1),
    (96000.0, 30000.0, 12.0),
    (8000.0, 3999.0, 1.0),
])
def test_all_pass_symmetry_and_unity_magnitude(fs, f, q):
    biquad = all_pass(fs, f, q)
    assert biquad.b0 == biquad.a2
    assert biquad.b2 == biquad.a0
    assert biquad.b1 == biquad.a1

    w = np.linspace(0, np.pi, 1024)
    np.testing.assert_allclose(np.abs(response(biquad, w)), 1.0, rtol=1e-9)


# ───────────────────────── degenerate inputs ────────────────────────── #

@pytest.mark.parametrize("frequency", [0.0, FS / 2])
@pytest.mark.parametrize("design", [band_pass2, band_stop], ids=["bandpass2", "bandstop"])
def test_bandwidth_designs_at_singular_frequency_are_non_finite(design, frequency):
    biquad = design(FS, frequency, 1.0)
    assert not np.any(np.isfinite(biquad.as_array()))


@pytest.mark.parametrize("frequency", [0.0, FS / 2])
def test_bandwidth_alpha_is_non_finite_at_singular_frequency(frequency):
    w = np.float64(w0(FS, frequency))
    with np.errstate(all="ignore"):
        assert not np.isfinite(alpha_from_bandwidth(w, np.sin(w), 1.0))


@pytest.mark.parametrize("frequency", [0.0, FS / 2])
def test_band_shelf_asserts_on_singular_frequency(frequency):
    with pytest.raises(AssertionError, match="band shelf alpha"):
        band_shelf(FS, frequency, 6.0, 1.0)


def test_zero_q_propagates_instead_of_raising():
    biquad = low_pass(FS, 1000.0, 0.0)
    assert not biquad.is_finite()


def test_degenerate_design_logs_warning(caplog):
    with caplog.at_level("WARNING", logger="pybiquad.biquad"):
        band_stop(FS, 0.0, 1.0)
    assert "Degenerate biquad" in caplog.text
