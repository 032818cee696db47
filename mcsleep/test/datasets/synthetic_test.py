# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Tests for the synthetic signals."""

import numpy as np
import pytest

import mcsleep
from mcsleep.datasets import (
    oscillatory_signal, synthetic_eeg, transient_signal)
from mcsleep.util.testutils import all_almost_equal, all_equal, simple_fixture


rank = simple_fixture('rank', [1, 2, 3])


def test_transient_signal():
    """Without trend the signal is piecewise constant."""
    x = transient_signal(4, 500, njumps=3, lowpass=0.0, seed=0)
    assert x.shape == (4, 500)

    # At most two jumps per pulse
    njumps = np.count_nonzero(np.diff(x, axis=1), axis=1)
    assert np.all(njumps <= 6)
    assert np.any(x != 0)

    # No pulses leaves the trend only
    trend = transient_signal(2, 100, njumps=0, lowpass=0.5, seed=1)
    assert np.max(np.abs(trend)) <= 0.5
    assert np.max(np.abs(np.diff(trend, n=2, axis=1))) < 1e-2


def test_oscillatory_signal_rank(rank):
    s = oscillatory_signal(5, 800, fs=100.0, rank=rank, seed=2)
    assert s.shape == (5, 800)
    assert np.linalg.matrix_rank(s) <= rank


def test_oscillatory_signal_frequency():
    """The spectrum peaks at the oscillation frequency."""
    fs = 100.0
    s = oscillatory_signal(1, 1000, fs=fs, freqs=(12.0,), nbursts=1,
                           duration=2.0, seed=3)
    spectrum = np.abs(np.fft.rfft(s[0]))
    freqs = np.fft.rfftfreq(1000, d=1 / fs)
    assert abs(freqs[np.argmax(spectrum)] - 12.0) <= 0.5


def test_synthetic_eeg():
    y, x, s = synthetic_eeg(m=3, n=600, noise=0.1, seed=4)
    assert y.shape == x.shape == s.shape == (3, 600)
    assert np.std(y - x - s) == pytest.approx(0.1, rel=0.2)

    # The noise is drawn last, so the components do not change
    y0, x0, s0 = synthetic_eeg(m=3, n=600, noise=0.0, seed=4)
    assert all_equal(x0, x)
    assert all_equal(s0, s)
    assert all_almost_equal(y0, x0 + s0)


def test_seed_reproducible():
    assert all_equal(transient_signal(2, 50, seed=5),
                     transient_signal(2, 50, seed=5))
    assert all_equal(synthetic_eeg(m=2, n=300, seed=6)[0],
                     synthetic_eeg(m=2, n=300, seed=6)[0])


def test_invalid_arguments():
    with pytest.raises(ValueError):
        transient_signal(0, 10)
    with pytest.raises(ValueError):
        transient_signal(2, 10, njumps=-1)
    with pytest.raises(ValueError):
        oscillatory_signal(2, 100, fs=100.0, rank=0)
    with pytest.raises(ValueError):
        oscillatory_signal(2, 100, fs=100.0, freqs=())
    with pytest.raises(ValueError):
        synthetic_eeg(noise=-1.0)


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
