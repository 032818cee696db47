# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Overlapping short-time block transform and its adjoint.

The forward transform cuts a multichannel signal of shape ``(m, n)`` into
overlapping blocks of length ``K``, with ``O`` samples of overlap between
consecutive blocks. All channels of one block position form one ``m x K``
matrix, and the coefficient array has shape ``(nblocks, m, K)``.

Each sample is weighted with ``1 / sqrt(count)``, where ``count`` is the
number of blocks covering it. With this normalization the adjoint
transform (overlap-add with the same weights) inverts the forward
transform, i.e., the pair is a Parseval frame::

    block_transform_adjoint(block_transform(y, K, O), K, O) == y
"""

import numpy as np

from mcsleep.util.exceptions import BlockGeometryError, InvalidParameterError


__all__ = ('block_geometry', 'block_transform', 'block_transform_adjoint',
           'pad_to_block_geometry')


def _check_block_params(K, O):
    """Return ``(K, O)`` as integers, raise for invalid values."""
    K_in, O_in = K, O
    try:
        K = int(K)
    except (TypeError, ValueError):
        raise InvalidParameterError('K', 'must be an integer, got {!r}'
                                    ''.format(K_in))
    if K != K_in:
        raise InvalidParameterError('K', 'must be an integer, got {!r}'
                                    ''.format(K_in))
    if K <= 0:
        raise InvalidParameterError('K', 'must be positive, got {}'
                                    ''.format(K_in))

    try:
        O = int(O)
    except (TypeError, ValueError):
        raise InvalidParameterError('O', 'must be an integer, got {!r}'
                                    ''.format(O_in))
    if O != O_in:
        raise InvalidParameterError('O', 'must be an integer, got {!r}'
                                    ''.format(O_in))
    if not 0 <= O < K:
        raise InvalidParameterError(
            'O', 'must satisfy 0 <= O < K = {}, got {}'.format(K, O_in))

    return K, O


def block_geometry(n, K, O):
    """Return the number of blocks and the hop size for a signal length.

    The blocks start at ``0, R, 2 * R, ...`` with hop size ``R = K - O``
    and must cover the signal exactly, i.e., ``n >= K`` and ``n - K`` must
    be a multiple of ``R``.

    Parameters
    ----------
    n : positive int
        Number of samples of the signal.
    K : positive int
        Block length.
    O : int
        Overlap of consecutive blocks, ``0 <= O < K``.

    Returns
    -------
    nblocks : int
        Number of blocks.
    hop : int
        Distance between the starts of consecutive blocks.

    Raises
    ------
    InvalidParameterError
        If ``K`` or ``O`` are invalid.
    BlockGeometryError
        If the signal length is incompatible with ``K`` and ``O``.

    Examples
    --------
    >>> block_geometry(12, K=4, O=2)
    (5, 2)
    """
    K, O = _check_block_params(K, O)
    n = int(n)
    hop = K - O
    if n < K or (n - K) % hop != 0:
        raise BlockGeometryError(
            'signal length {} cannot be tiled by blocks of length K={} with '
            'overlap O={}; the length must be K + k * (K - O) for some '
            'integer k >= 0, see `pad_to_block_geometry`'.format(n, K, O))
    return (n - K) // hop + 1, hop


def _block_indices(n, K, O):
    """Return the sample indices and normalization weights of the blocks.

    Returns
    -------
    indices : `numpy.ndarray`
        Integer array of shape ``(nblocks, K)``, row ``b`` holding the
        sample indices covered by block ``b``.
    weights : `numpy.ndarray`
        Array of shape ``(n,)`` holding ``1 / sqrt(count)`` per sample.
    """
    nblocks, hop = block_geometry(n, K, O)
    starts = hop * np.arange(nblocks)
    indices = starts[:, None] + np.arange(K)[None, :]
    count = np.bincount(indices.ravel(), minlength=n)
    weights = 1.0 / np.sqrt(count)
    return indices, weights


def _as_signal(y):
    y = np.asarray(y)
    if y.ndim != 2:
        raise BlockGeometryError('signal must be 2-dimensional with shape '
                                 '(channels, samples), got shape {}'
                                 ''.format(y.shape))
    if not np.issubdtype(y.dtype, np.floating):
        y = y.astype(float)
    return y


def block_transform(y, K, O):
    """Return the overlapping block coefficients of a signal.

    Parameters
    ----------
    y : array-like
        Signal of shape ``(m, n)`` with ``m`` channels and ``n`` samples.
    K : positive int
        Block length.
    O : int
        Overlap of consecutive blocks, ``0 <= O < K``.

    Returns
    -------
    coeffs : `numpy.ndarray`
        Block coefficients of shape ``(nblocks, m, K)``.

    See Also
    --------
    block_transform_adjoint : adjoint (and inverse) transform
    block_geometry : number of blocks for given ``n``, ``K``, ``O``

    Examples
    --------
    Without overlap the blocks are plain segments:

    >>> y = np.arange(8.0).reshape(1, 8)
    >>> block_transform(y, K=4, O=0)[:, 0, :]
    array([[0., 1., 2., 3.],
           [4., 5., 6., 7.]])
    """
    y = _as_signal(y)
    indices, weights = _block_indices(y.shape[1], K, O)
    # (m, nblocks, K) -> (nblocks, m, K)
    return np.transpose((y * weights)[:, indices], (1, 0, 2))


def block_transform_adjoint(coeffs, K, O):
    """Return the signal synthesized from block coefficients by overlap-add.

    This is the adjoint of `block_transform`. Since the pair is a Parseval
    frame, it also inverts the forward transform.

    Parameters
    ----------
    coeffs : array-like
        Block coefficients of shape ``(nblocks, m, K)``.
    K : positive int
        Block length.
    O : int
        Overlap of consecutive blocks, ``0 <= O < K``.

    Returns
    -------
    signal : `numpy.ndarray`
        Signal of shape ``(m, n)`` with ``n = K + (nblocks - 1) * (K - O)``.

    Examples
    --------
    >>> y = np.array([[1.0, -2.0, 3.0, 0.5, 4.0, 1.0]])
    >>> c = block_transform(y, K=4, O=2)
    >>> np.allclose(block_transform_adjoint(c, K=4, O=2), y)
    True
    """
    K, O = _check_block_params(K, O)
    coeffs = np.asarray(coeffs)
    if coeffs.ndim != 3 or coeffs.shape[2] != K:
        raise BlockGeometryError(
            'coefficients must have shape (nblocks, channels, {}), got {}'
            ''.format(K, coeffs.shape))
    nblocks, m, _ = coeffs.shape
    if nblocks == 0:
        raise BlockGeometryError('coefficient array contains no blocks')

    n = K + (nblocks - 1) * (K - O)
    indices, weights = _block_indices(n, K, O)

    out = np.zeros((n, m), dtype=np.result_type(coeffs.dtype, float))
    # Accumulate all blocks at once, indices repeat in the overlaps
    np.add.at(out, indices, np.transpose(coeffs, (0, 2, 1)))
    return out.T * weights


def pad_to_block_geometry(y, K, O):
    """Zero-pad a signal along time to the next compatible length.

    Parameters
    ----------
    y : array-like
        Signal of shape ``(m, n)``.
    K : positive int
        Block length.
    O : int
        Overlap of consecutive blocks, ``0 <= O < K``.

    Returns
    -------
    padded : `numpy.ndarray`
        Signal of shape ``(m, n_pad)`` with ``n_pad >= n`` compatible with
        `block_geometry`. The original samples come first.
    n : int
        The original number of samples, to crop results with
        ``result[:, :n]``.

    Examples
    --------
    >>> padded, n = pad_to_block_geometry(np.ones((2, 7)), K=4, O=2)
    >>> padded.shape, n
    ((2, 8), 7)
    """
    K, O = _check_block_params(K, O)
    y = _as_signal(y)
    n = y.shape[1]
    hop = K - O
    if n <= K:
        n_pad = K
    else:
        n_pad = K + hop * int(np.ceil((n - K) / hop))

    if n_pad == n:
        return y.copy(), n

    padded = np.zeros((y.shape[0], n_pad), dtype=y.dtype)
    padded[:, :n] = y
    return padded, n


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
