# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Synthetic multichannel signals with transient and oscillatory parts."""

import numpy as np


__all__ = ('transient_signal', 'oscillatory_signal', 'synthetic_eeg')


def _random_state(seed):
    if isinstance(seed, np.random.RandomState):
        return seed
    return np.random.RandomState(seed)


def _check_shape(m, n):
    m, m_in = int(m), m
    n, n_in = int(n), n
    if m <= 0 or m != m_in:
        raise ValueError('`m` must be a positive integer, got {}'.format(m_in))
    if n <= 0 or n != n_in:
        raise ValueError('`n` must be a positive integer, got {}'.format(n_in))
    return m, n


def transient_signal(m, n, njumps=4, lowpass=0.5, seed=None):
    """Return a sparse piecewise constant signal plus a smooth trend.

    Every channel holds ``njumps`` rectangular pulses with random position,
    width and amplitude on top of a slowly varying cosine trend.

    Parameters
    ----------
    m, n : positive int
        Number of channels and samples.
    njumps : non-negative int, optional
        Number of pulses per channel.
    lowpass : non-negative float, optional
        Amplitude of the smooth trend.
    seed : int or `numpy.random.RandomState`, optional
        Seed of the random generator.

    Returns
    -------
    x : `numpy.ndarray`
        Signal of shape ``(m, n)``.

    Examples
    --------
    >>> x = transient_signal(3, 100, njumps=2, lowpass=0.0, seed=1)
    >>> x.shape
    (3, 100)
    """
    m, n = _check_shape(m, n)
    njumps = int(njumps)
    if njumps < 0:
        raise ValueError('`njumps` must be non-negative, got {}'
                         ''.format(njumps))
    rng = _random_state(seed)

    x = np.zeros((m, n))
    min_width = max(1, n // 50)
    max_width = max(min_width + 1, n // 10)
    for j in range(m):
        for _ in range(njumps):
            width = rng.randint(min_width, max_width)
            start = rng.randint(0, max(1, n - width))
            x[j, start:start + width] += 2 * rng.standard_normal()

    # Less than one period over the whole signal
    t = np.arange(n) / float(n)
    phase = rng.uniform(0, 2 * np.pi, size=(m, 1))
    x += lowpass * np.cos(np.pi * t[None, :] + phase)
    return x


def oscillatory_signal(m, n, fs, rank=1, freqs=(13.0,), nbursts=2,
                       duration=1.0, seed=None):
    """Return low-rank bursts of oscillations.

    ``rank`` source signals, each a sequence of Hann-windowed sinusoid
    bursts, are mixed into ``m`` channels by a random matrix. The result
    has rank at most ``rank`` across channels.

    Parameters
    ----------
    m, n : positive int
        Number of channels and samples.
    fs : positive float
        Sampling frequency in Hz.
    rank : positive int, optional
        Number of sources.
    freqs : sequence of float, optional
        Oscillation frequencies in Hz, cycled over the sources.
    nbursts : non-negative int, optional
        Number of bursts per source.
    duration : positive float, optional
        Duration of a burst in seconds.
    seed : int or `numpy.random.RandomState`, optional
        Seed of the random generator.

    Returns
    -------
    s : `numpy.ndarray`
        Signal of shape ``(m, n)``.

    Examples
    --------
    >>> s = oscillatory_signal(4, 400, fs=100.0, rank=1, seed=0)
    >>> int(np.linalg.matrix_rank(s))
    1
    """
    m, n = _check_shape(m, n)
    fs = float(fs)
    rank = int(rank)
    if rank <= 0:
        raise ValueError('`rank` must be positive, got {}'.format(rank))
    freqs = [float(f) for f in freqs]
    if not freqs:
        raise ValueError('`freqs` must not be empty')
    rng = _random_state(seed)

    width = min(n, max(1, int(round(duration * fs))))
    window = np.hanning(width)
    t = np.arange(n) / fs

    sources = np.zeros((rank, n))
    for r in range(rank):
        freq = freqs[r % len(freqs)]
        for _ in range(int(nbursts)):
            start = rng.randint(0, n - width + 1)
            phase = rng.uniform(0, 2 * np.pi)
            sl = slice(start, start + width)
            sources[r, sl] += window * np.sin(2 * np.pi * freq * t[sl] +
                                              phase)

    mixing = rng.standard_normal((m, rank))
    return mixing.dot(sources)


def synthetic_eeg(m=3, n=2000, fs=100.0, njumps=4, lowpass=0.5, rank=1,
                  freqs=(13.0,), nbursts=2, noise=0.05, seed=None):
    """Return a noisy sum of a transient and an oscillatory signal.

    Parameters
    ----------
    m, n : positive int, optional
        Number of channels and samples.
    fs : positive float, optional
        Sampling frequency in Hz.
    njumps, lowpass :
        Passed to `transient_signal`.
    rank, freqs, nbursts :
        Passed to `oscillatory_signal`.
    noise : non-negative float, optional
        Standard deviation of the additive white noise.
    seed : int or `numpy.random.RandomState`, optional
        Seed of the random generator.

    Returns
    -------
    y : `numpy.ndarray`
        Noisy observation ``x_true + s_true + noise``, shape ``(m, n)``.
    x_true : `numpy.ndarray`
        Transient component.
    s_true : `numpy.ndarray`
        Oscillatory component.

    Examples
    --------
    >>> y, x, s = synthetic_eeg(m=2, n=500, noise=0.0, seed=3)
    >>> np.allclose(y, x + s)
    True
    """
    rng = _random_state(seed)
    x_true = transient_signal(m, n, njumps=njumps, lowpass=lowpass, seed=rng)
    s_true = oscillatory_signal(m, n, fs, rank=rank, freqs=freqs,
                                nbursts=nbursts, seed=rng)

    noise = float(noise)
    if noise < 0:
        raise ValueError('`noise` must be non-negative, got {}'.format(noise))
    y = x_true + s_true + noise * rng.standard_normal(x_true.shape)
    return y, x_true, s_true


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
