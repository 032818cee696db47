# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""ADMM solver for the McSleep decomposition of multichannel signals."""

import numpy as np

from mcsleep.solvers.nonsmooth.parameters import McSleepParams
from mcsleep.solvers.nonsmooth.proximal_operators import (
    difference_norm_l1, nuclear_norm_sum, proximal_block_nuclear,
    proximal_fused_lasso)
from mcsleep.solvers.util.parallel import (
    parallel_map_blocks, parallel_map_rows, worker_pool)
from mcsleep.trafos.blocks import block_transform, block_transform_adjoint
from mcsleep.util.exceptions import BlockGeometryError, FrameIdentityError


__all__ = ('mcsleep', 'mcsleep_decompose', 'mcsleep_cost')


def _as_params(param):
    """Return ``param`` as `McSleepParams`."""
    if isinstance(param, McSleepParams):
        return param
    try:
        return McSleepParams.from_dict(param)
    except (TypeError, AttributeError):
        raise TypeError('`param` must be a `McSleepParams` instance or a '
                        'mapping, got {!r}'.format(param))


def _check_transform_pair(y, H, HT, K, O, check_frame):
    """Raise if ``H`` and ``HT`` do not fit ``y``.

    The synthesis ``HT`` must return arrays of the shape of ``y``. With
    ``check_frame``, ``HT(H(p)) == p`` is verified for a fixed random
    signal ``p``.
    """
    zero = np.zeros(y.shape)
    shape = np.shape(HT(H(zero, K, O), K, O))
    if shape != y.shape:
        raise BlockGeometryError(
            'transform pair maps signals of shape {} to shape {}'
            ''.format(y.shape, shape))

    if check_frame:
        test_signal = np.random.RandomState(0).standard_normal(y.shape)
        synth = HT(H(test_signal, K, O), K, O)
        if not np.allclose(synth, test_signal, rtol=1e-8, atol=1e-8):
            err = np.max(np.abs(synth - test_signal))
            raise FrameIdentityError(
                '`HT(H(p))` differs from `p` by up to {:.3e}; the transform '
                'pair must be a Parseval frame'.format(err))


def mcsleep_cost(y, x, c, HT, param):
    """Return the value of the McSleep objective.

    The objective is ::

        0.5 * ||y - (x + HT(c))||_F^2
            + lam1 * ||x||_1 + lam2 * ||D^2 x||_1 + lam3 * sum_b ||c_b||_*

    where ``D^2`` is the second order difference along time, applied to
    each channel, ``||.||_1`` is the entrywise L1 norm and the last sum
    runs over the nuclear norms of all block matrices of ``c``.

    Parameters
    ----------
    y : array-like
        Observed signal of shape ``(m, n)``.
    x : array-like
        Transient component of shape ``(m, n)``.
    c : array-like
        Block coefficients of the oscillatory component.
    HT : callable
        Synthesis transform, called as ``HT(c, K, O)``.
    param : `McSleepParams` or mapping
        Parameters of the decomposition.

    Returns
    -------
    cost : float

    Examples
    --------
    >>> param = McSleepParams(lam1=1, lam2=0, lam3=0, K=2, mu=1, niter=1)
    >>> y = np.zeros((1, 4))
    >>> x = np.array([[0.0, 2.0, 0.0, 0.0]])
    >>> c = np.zeros((3, 1, 2))
    >>> mcsleep_cost(y, x, c, block_transform_adjoint, param)
    4.0
    """
    param = _as_params(param)
    y = np.asarray(y, dtype=float)
    x = np.asarray(x, dtype=float)
    residual = y - (x + HT(c, param.K, param.O))
    return float(0.5 * np.sum(residual ** 2) +
                 param.lam1 * np.sum(np.abs(x)) +
                 param.lam2 * difference_norm_l1(x, order=2) +
                 param.lam3 * nuclear_norm_sum(c))


def mcsleep(y, H, HT, param, callback=None, n_jobs=1, check_frame=True,
            prox_x=None, prox_c=None):
    r"""Decompose ``y`` into transient and oscillatory components.

    McSleep solves the convex problem ::

        min_{x, c}  0.5 * ||y - x - HT(c)||_F^2 + lam1 * ||x||_1
                    + lam2 * ||D^2 x||_1 + lam3 * sum_b ||c_b||_*

    with the alternating direction method of multipliers (ADMM). Here
    ``x`` is the sparse and piecewise smooth *transient* component, ``c``
    are the block coefficients of the *oscillatory* component, whose
    blocks ``c_b`` (all channels of one time segment) are encouraged to
    have low rank. See the Notes and [PS2017] for details.

    Parameters
    ----------
    y : array-like
        Multichannel signal of shape ``(m, n)``, one channel per row.
        It is not modified.
    H, HT : callable
        Analysis and synthesis transforms, called as ``H(y, K, O)`` and
        ``HT(c, K, O)``. ``HT`` must be the adjoint of ``H`` and satisfy
        ``HT(H(y)) == y``, e.g., `block_transform` and
        `block_transform_adjoint`.
    param : `McSleepParams` or mapping
        Parameters of the decomposition. A mapping is converted with
        `McSleepParams.from_dict`.
    callback : callable, optional
        Function called with the current transient estimate ``x`` after
        each iteration.
    n_jobs : int, optional
        Number of worker threads for the per-channel and per-block
        proximal steps.
    check_frame : bool, optional
        If ``True``, verify ``HT(H(p)) == p`` for a random signal before
        iterating.
    prox_x : callable, optional
        Proximal factory of the transient penalty. Called with the step
        size ``1 / mu``, it must return a function acting on one channel.
        Default: ``proximal_fused_lasso(lam1, lam2)``
    prox_c : callable, optional
        Proximal factory of the block penalty. Called with the step size
        ``1 / mu``, it must return a function acting on a stack of blocks.
        Default: ``proximal_block_nuclear(lam3)``

    Returns
    -------
    x : `numpy.ndarray`
        Transient component, same shape as ``y``.
    s : `numpy.ndarray`
        Oscillatory component ``HT(c)``, same shape as ``y``.
    cost : `numpy.ndarray`
        Objective value after each iteration, of length ``niter``. All
        zero unless ``param.calculate_cost`` is set.

    Raises
    ------
    InvalidParameterError
        If ``param`` is invalid.
    BlockGeometryError
        If ``y`` is not two-dimensional or its length does not fit the
        transform pair.
    FrameIdentityError
        If ``check_frame`` is set and ``HT(H(p)) != p``.

    Notes
    -----
    With the splitting ``u = x`` and ``v = c``, the variables
    :math:`x^{(0)} = u^{(0)} = d_1^{(0)} = 0` and
    :math:`v^{(0)} = d_2^{(0)} = H(0)`, every iteration performs

    .. math::
        x &= \mathrm{soft}\big(\mathrm{tvd}(u - d_1, \lambda_2 / \mu),
             \lambda_1 / \mu\big)

        c &= \mathrm{SVT}(v - d_2, \lambda_3 / \mu)

        g_1 &= y / \mu + x + d_1, \quad g_2 = H(y) / \mu + c + d_2

        u &= g_1 - (g_1 + H^T g_2) / (\mu + 2)

        v &= g_2 - H(g_1 + H^T g_2) / (\mu + 2)

        d_1 &\leftarrow d_1 - (u - x), \quad d_2 \leftarrow d_2 - (v - c)

    The least squares step for ``(u, v)`` is exact since ``H`` is a
    Parseval frame. After ``niter`` iterations ``s = HT(c)``.

    References
    ----------
    [PS2017] Parekh, A, Selesnick, I W, Osorio, R S, Varga, A W, Rapoport,
    D M, and Ayappa, I. *Multichannel Sleep Spindle Detection using
    Sparse Low-Rank Optimization*. Journal of Neuroscience Methods, 288
    (2017), pp 1-16.

    Examples
    --------
    >>> y = np.zeros((2, 8))
    >>> param = {'lam1': 0.3, 'lam2': 6.5, 'lam3': 36, 'K': 4, 'O': 2,
    ...          'mu': 0.5, 'Nit': 5, 'calculateCost': False}
    >>> H = mcsleep.trafos.block_transform
    >>> HT = mcsleep.trafos.block_transform_adjoint
    >>> x, s, cost = mcsleep.mcsleep(y, H, HT, param)
    >>> x.shape, s.shape, cost.shape
    ((2, 8), (2, 8), (5,))
    """
    if not callable(H):
        raise TypeError('`H` {!r} is not callable'.format(H))
    if not callable(HT):
        raise TypeError('`HT` {!r} is not callable'.format(HT))
    if callback is not None and not callable(callback):
        raise TypeError('`callback` {} is not callable'.format(callback))

    param = _as_params(param)
    lam1, lam2, lam3 = param.lam1, param.lam2, param.lam3
    K, O, mu, niter = param.K, param.O, param.mu, param.niter

    y = np.array(y, dtype=float)
    if y.ndim != 2:
        raise BlockGeometryError('`y` must be 2-dimensional with shape '
                                 '(channels, samples), got shape {}'
                                 ''.format(y.shape))

    _check_transform_pair(y, H, HT, K, O, check_frame)

    x = np.zeros_like(y)
    cost = np.zeros(niter)
    if niter == 0:
        return x, np.zeros_like(y), cost

    # Store proximals since their initialization may involve computation
    if prox_x is None:
        prox_x = proximal_fused_lasso(lam1, lam2)
    if prox_c is None:
        prox_c = proximal_block_nuclear(lam3)
    prox_sigma_x = prox_x(1.0 / mu)
    prox_sigma_c = prox_c(1.0 / mu)

    u = np.zeros_like(y)
    d1 = np.zeros_like(y)
    v = np.asarray(H(x, K, O), dtype=float)
    d2 = v.copy()

    # Fixed over the iterations
    y_mu = y / mu
    Hy_mu = np.asarray(H(y, K, O), dtype=float) / mu

    with worker_pool(n_jobs) as pool:
        for i in range(niter):
            # Transient component, one channel at a time
            x = parallel_map_rows(prox_sigma_x, u - d1, pool)

            # Low rank component, chunks of blocks
            c = parallel_map_blocks(prox_sigma_c, v - d2, pool)

            # Least squares step for the split variables
            g1 = y_mu + x + d1
            g2 = Hy_mu + c + d2
            tmp = g1 + HT(g2, K, O)
            u = g1 - tmp / (mu + 2)
            v = g2 - H(tmp, K, O) / (mu + 2)

            # Dual update
            d1 -= u - x
            d2 -= v - c

            if param.calculate_cost:
                cost[i] = mcsleep_cost(y, x, c, HT, param)

            if callback is not None:
                callback(x)

    s = HT(c, K, O)
    return x, s, cost


def mcsleep_decompose(y, param, **kwargs):
    """Run `mcsleep` with the overlapping block transform.

    Parameters
    ----------
    y : array-like
        Multichannel signal of shape ``(m, n)``. ``n`` must be compatible
        with the block geometry, see `pad_to_block_geometry`.
    param : `McSleepParams` or mapping
        Parameters of the decomposition.

    Other Parameters
    ----------------
    kwargs :
        Further keyword arguments passed to `mcsleep`.

    Returns
    -------
    x, s, cost : `numpy.ndarray`
        Transient component, oscillatory component and cost history.

    See Also
    --------
    mcsleep
    mcsleep.trafos.blocks.block_transform
    """
    return mcsleep(y, block_transform, block_transform_adjoint, param,
                   **kwargs)


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
