# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Sleep spindle detection on the oscillatory McSleep component.

A recording is decomposed epoch by epoch with `epoch_decompose`. Spindles
are then detected in the oscillatory component by band-pass filtering to
the sigma band, computing the Teager-Kaiser energy and thresholding it,
see [PS2017].

References
----------
[PS2017] Parekh, A, Selesnick, I W, Osorio, R S, Varga, A W, Rapoport,
D M, and Ayappa, I. *Multichannel Sleep Spindle Detection using Sparse
Low-Rank Optimization*. Journal of Neuroscience Methods, 288 (2017),
pp 1-16.
"""

import warnings

import numpy as np
import scipy.signal

from mcsleep.solvers.nonsmooth.mcsleep_admm import mcsleep_decompose
from mcsleep.solvers.nonsmooth.parameters import McSleepParams
from mcsleep.trafos.blocks import pad_to_block_geometry
from mcsleep.util.exceptions import BlockGeometryError


__all__ = ('epoch_decompose', 'bandpass', 'teager_kaiser', 'detect_spindles')


def epoch_decompose(y, fs, param, epoch_length=30.0, n_jobs=1):
    """Decompose a long recording epoch by epoch.

    Each epoch is zero-padded to a length compatible with the block
    geometry of ``param``, decomposed with `mcsleep_decompose` and cropped
    again. A last, shorter epoch is processed the same way.

    Parameters
    ----------
    y : array-like
        Recording of shape ``(m, n)``, one channel per row.
    fs : positive float
        Sampling frequency in Hz.
    param : `McSleepParams` or mapping
        Parameters of the decomposition.
    epoch_length : positive float, optional
        Length of an epoch in seconds.
    n_jobs : int, optional
        Number of worker threads used inside each decomposition.

    Returns
    -------
    x : `numpy.ndarray`
        Transient component, same shape as ``y``.
    s : `numpy.ndarray`
        Oscillatory component, same shape as ``y``.

    Examples
    --------
    >>> param = McSleepParams(lam1=0.3, lam2=6.5, lam3=36, K=20, mu=0.5,
    ...                       niter=2)
    >>> x, s = epoch_decompose(np.zeros((2, 300)), fs=10.0, param=param,
    ...                        epoch_length=10.0)
    >>> x.shape, s.shape
    ((2, 300), (2, 300))
    """
    if not isinstance(param, McSleepParams):
        param = McSleepParams.from_dict(param)

    y = np.asarray(y, dtype=float)
    if y.ndim != 2:
        raise BlockGeometryError('`y` must be 2-dimensional with shape '
                                 '(channels, samples), got shape {}'
                                 ''.format(y.shape))

    fs, fs_in = float(fs), fs
    if fs <= 0:
        raise ValueError('`fs` must be positive, got {}'.format(fs_in))

    epoch_length, epoch_length_in = float(epoch_length), epoch_length
    nepoch = int(round(epoch_length * fs))
    if nepoch <= 0:
        raise ValueError('`epoch_length` must be positive, got {}'
                         ''.format(epoch_length_in))

    n = y.shape[1]
    if n % nepoch != 0:
        warnings.warn('recording length {} is not a multiple of the epoch '
                      'length {}, the last epoch has {} samples'
                      ''.format(n, nepoch, n % nepoch), RuntimeWarning)

    x = np.zeros_like(y)
    s = np.zeros_like(y)
    for start in range(0, n, nepoch):
        epoch = y[:, start:start + nepoch]
        padded, length = pad_to_block_geometry(epoch, param.K, param.O)
        x_ep, s_ep, _ = mcsleep_decompose(padded, param, n_jobs=n_jobs)
        x[:, start:start + length] = x_ep[:, :length]
        s[:, start:start + length] = s_ep[:, :length]

    return x, s


def _check_band(band, fs):
    low, high = (float(f) for f in band)
    if not 0 < low < high < fs / 2:
        raise ValueError('`band` must satisfy 0 < low < high < fs / 2 = {}, '
                         'got {!r}'.format(fs / 2, band))
    return low, high


def bandpass(s, fs, band=(11, 16), order=4):
    """Return the zero-phase Butterworth band-pass filtered signal.

    Parameters
    ----------
    s : array-like
        Signal, filtered along the last axis.
    fs : positive float
        Sampling frequency in Hz.
    band : 2-tuple of float, optional
        Lower and upper cutoff frequencies in Hz. The default is the sigma
        band of sleep spindles.
    order : positive int, optional
        Order of the Butterworth prototype. Forward-backward filtering
        doubles the effective order.

    Returns
    -------
    filtered : `numpy.ndarray`
        Filtered signal of the same shape as ``s``.

    Examples
    --------
    A constant offset is removed:

    >>> t = np.arange(1000) / 100.0
    >>> s = 1.0 + np.sin(2 * np.pi * 13 * t)
    >>> f = bandpass(s, fs=100.0)
    >>> bool(abs(f[300:700].mean()) < 1e-2)
    True
    """
    fs = float(fs)
    low, high = _check_band(band, fs)
    sos = scipy.signal.butter(int(order), [low, high], btype='bandpass',
                              fs=fs, output='sos')
    return scipy.signal.sosfiltfilt(sos, np.asarray(s, dtype=float),
                                    axis=-1)


def teager_kaiser(s):
    """Return the Teager-Kaiser energy of ``s`` along the last axis.

    The energy is ``s[t] ** 2 - s[t - 1] * s[t + 1]`` in the interior and
    zero at the first and last sample.

    Examples
    --------
    For a sinusoid ``A * cos(w * t)`` the energy is ``A**2 * sin(w)**2``:

    >>> t = np.arange(50)
    >>> psi = teager_kaiser(2 * np.cos(0.3 * t))
    >>> np.allclose(psi[1:-1], 4 * np.sin(0.3) ** 2)
    True
    """
    s = np.asarray(s, dtype=float)
    psi = np.zeros_like(s)
    psi[..., 1:-1] = s[..., 1:-1] ** 2 - s[..., :-2] * s[..., 2:]
    return psi


def _runs(mask):
    """Return ``(start, stop)`` of all runs of ``True`` in ``mask``."""
    edges = np.diff(np.concatenate(([0], mask.astype(np.int8), [0])))
    starts = np.flatnonzero(edges == 1)
    stops = np.flatnonzero(edges == -1)
    return list(zip(starts.tolist(), stops.tolist()))


def detect_spindles(s, fs, threshold, band=(11, 16), min_duration=0.5,
                    max_duration=3.0, mode='average'):
    """Detect sleep spindles in an oscillatory signal.

    The signal is band-pass filtered to ``band``, its Teager-Kaiser energy
    is computed per channel and the channels are combined. Samples whose
    energy exceeds ``threshold`` are candidates, and runs of candidates
    lasting between ``min_duration`` and ``max_duration`` are reported.

    Parameters
    ----------
    s : array-like
        Oscillatory component of shape ``(m, n)`` or ``(n,)``.
    fs : positive float
        Sampling frequency in Hz.
    threshold : float
        Energy threshold.
    band : 2-tuple of float, optional
        Frequency band of the spindles in Hz.
    min_duration, max_duration : float, optional
        Admissible duration of a spindle in seconds.
    mode : {'average', 'any'}, optional
        How channels are combined. ``'average'`` thresholds the channel
        average of the energy, ``'any'`` accepts a sample if any channel
        exceeds the threshold.

    Returns
    -------
    mask : `numpy.ndarray`
        Boolean array of shape ``(n,)``, ``True`` inside detected spindles.
    intervals : list of tuple
        Sample intervals ``(start, stop)`` of the spindles, ``stop``
        exclusive.
    """
    s = np.asarray(s, dtype=float)
    if s.ndim == 1:
        s = s[None, :]
    if s.ndim != 2:
        raise ValueError('`s` must be 1- or 2-dimensional, got shape {}'
                         ''.format(s.shape))

    fs = float(fs)
    min_duration, max_duration = float(min_duration), float(max_duration)
    if not 0 <= min_duration <= max_duration:
        raise ValueError('durations must satisfy 0 <= min_duration <= '
                         'max_duration, got {} and {}'
                         ''.format(min_duration, max_duration))

    energy = teager_kaiser(bandpass(s, fs, band=band))
    mode, mode_in = str(mode).lower(), mode
    if mode == 'average':
        candidates = energy.mean(axis=0) > threshold
    elif mode == 'any':
        candidates = np.any(energy > threshold, axis=0)
    else:
        raise ValueError('`mode` {!r} not understood'.format(mode_in))

    min_len = int(np.ceil(min_duration * fs))
    max_len = int(np.floor(max_duration * fs))

    mask = np.zeros(s.shape[1], dtype=bool)
    intervals = []
    for start, stop in _runs(candidates):
        if min_len <= stop - start <= max_len:
            mask[start:stop] = True
            intervals.append((start, stop))

    return mask, intervals


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
