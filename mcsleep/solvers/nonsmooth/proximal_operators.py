# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Proximal operators and factory functions for creating them.

The factory functions follow a common convention: a factory is created
from the regularization weights, and calling it with a step size
``sigma`` returns the proximal operator of ``sigma`` times the penalty,
as a function mapping an array to an array.

For more details on proximal operators including how to evaluate the
proximal operator of a variety of functions see [PB2014].

References
----------
[PB2014] Parikh, N, and Boyd, S. *Proximal Algorithms*.
Foundations and Trends in Optimization, 1 (2014), pp 127-239.

[SSL2017] Selesnick, I W, Sendur, L, and Parekh, A. *Total Variation
Denoising (an MM Algorithm)*. Lecture notes, NYU Tandon (2017).
"""

from functools import lru_cache
import warnings

import numpy as np
import scipy.linalg
import scipy.special


__all__ = ('soft_threshold', 'total_variation_denoise', 'block_svt',
           'nuclear_norm_sum', 'difference_norm_l1',
           'proximal_l1', 'proximal_total_variation', 'proximal_fused_lasso',
           'proximal_block_nuclear')


def soft_threshold(z, t):
    """Return the soft-thresholded values ``sign(z) * max(|z| - t, 0)``.

    This is the proximal operator of ``t * ||.||_1``.

    Parameters
    ----------
    z : array-like
        Values to shrink.
    t : non-negative float
        Threshold.

    Returns
    -------
    shrunk : `numpy.ndarray`
        Array of the same shape as ``z``.

    Examples
    --------
    >>> soft_threshold([-3.0, -0.5, 0.0, 1.0, 2.5], 1.0)
    array([-2. , -0. ,  0. ,  0. ,  1.5])
    """
    z = np.asarray(z, dtype=float)
    return np.sign(z) * np.maximum(np.abs(z) - t, 0)


def _difference_adjoint(w, order):
    """Apply the adjoint of ``np.diff(., n=order)`` to ``w``."""
    for _ in range(order):
        w = -np.diff(np.concatenate(([0.0], w, [0.0])))
    return w


@lru_cache(maxsize=8)
def _difference_gram_bands(order):
    """Return the diagonals ``r_0, ..., r_order`` of ``D D^T``.

    ``D`` is the ``order``-th difference matrix, whose rows all hold the
    same stencil. ``D D^T`` is therefore a symmetric banded Toeplitz
    matrix with the autocorrelation of the stencil on its diagonals.
    """
    k = np.arange(order + 1)
    stencil = (-1.0) ** (order - k) * scipy.special.binom(order, k)
    return np.correlate(stencil, stencil, mode='full')[order:]


def total_variation_denoise(z, lam, order=2, niter=100, tol=1e-8):
    r"""Return the higher order total variation denoised version of ``z``.

    Computes the minimizer of ::

        0.5 * ||x - z||_2^2 + lam * ||D^k x||_1

    where ``D^k`` is the ``k``-th order finite difference along the
    sequence, i.e., the proximal operator of ``lam * ||D^k .||_1``.
    For ``order=2`` the penalty promotes piecewise linear sequences.

    Parameters
    ----------
    z : array-like
        One-dimensional sequence to denoise.
    lam : non-negative float
        Regularization weight.
    order : positive int, optional
        Order ``k`` of the finite difference.
    niter : positive int, optional
        Maximum number of majorization-minimization iterations used to
        find the starting point of the active set refinement.
    tol : non-negative float, optional
        Stop the majorization-minimization iteration when the maximum
        change of an iterate is below ``tol * max(1, max|x|)``.

    Returns
    -------
    x : `numpy.ndarray`
        Denoised sequence, same length as ``z``.

    Notes
    -----
    The problem is solved with the majorization-minimization iteration of
    [SSL2017]

    .. math::
        x^{(i+1)} = z - D^T \big(\lambda^{-1} \Lambda_i + D D^T\big)^{-1}
        D z, \quad \Lambda_i = \mathrm{diag}(|D x^{(i)}|),

    starting from :math:`x^{(0)} = z`. Each step is a banded symmetric
    positive definite solve of bandwidth ``k``. The matrix stays
    invertible even where :math:`D x^{(i)}` vanishes.

    Since the iteration approaches the solution only slowly where
    :math:`D x` should vanish, its dual estimate
    :math:`w = \lambda \Lambda_i^{-1} D x^{(i+1)}` is then refined with a
    primal-dual active set iteration on the dual problem
    :math:`\min_{|w_j| \leq \lambda} \frac{1}{2} \|z - D^T w\|_2^2`.
    Once the active set repeats, the optimality conditions hold exactly
    and :math:`x = z - D^T w` is the minimizer. If no active set repeats,
    a `RuntimeWarning` is issued and the majorization-minimization
    iterate is returned.

    For ``lam == 0`` or sequences not longer than ``order``, a copy of
    ``z`` is returned.

    Examples
    --------
    Affine sequences have vanishing second differences and are kept:

    >>> z = np.arange(6.0)
    >>> np.allclose(total_variation_denoise(z, lam=10.0), z)
    True
    """
    z = np.array(z, dtype=float, ndmin=1)
    if z.ndim != 1:
        raise ValueError('`z` must be one-dimensional, got shape {}'
                         ''.format(z.shape))

    lam, lam_in = float(lam), lam
    if lam < 0:
        raise ValueError('`lam` must be non-negative, got {}'.format(lam_in))

    order, order_in = int(order), order
    if order < 1 or order != order_in:
        raise ValueError('`order` must be a positive integer, got {}'
                         ''.format(order_in))

    n = z.size
    if lam == 0 or n <= order:
        return z

    # Upper banded storage of D D^T, see `scipy.linalg.solveh_banded`
    r = _difference_gram_bands(order)
    bands = _difference_gram_banded(np.arange(n - order), order)

    Dz = np.diff(z, n=order)
    x = z
    w = np.zeros(n - order)
    for _ in range(int(niter)):
        bands[order, :] = r[0] + np.abs(np.diff(x, n=order)) / lam
        w = scipy.linalg.solveh_banded(bands, Dz, check_finite=False)
        x_new = z - _difference_adjoint(w, order)

        change = np.max(np.abs(x_new - x))
        x = x_new
        if change <= tol * max(1.0, np.max(np.abs(x))):
            break

    x_exact = _tv_active_set(z, lam, order, w)
    if x_exact is None:
        warnings.warn('active set refinement of total variation denoising '
                      'did not converge, returning the approximate solution '
                      'after {} majorization-minimization iterations'
                      ''.format(int(niter)), RuntimeWarning)
        return x
    return x_exact


def _difference_gram_banded(idx, order):
    """Return the upper banded storage of ``(D D^T)[idx][:, idx]``.

    ``idx`` must be sorted. Entries of ``D D^T`` vanish more than
    ``order`` places off the diagonal, so the submatrix has the same
    bandwidth.
    """
    r = _difference_gram_bands(order)
    bands = np.zeros((order + 1, idx.size))
    bands[order, :] = r[0]
    for j in range(1, order + 1):
        gap = idx[j:] - idx[:-j]
        bands[order - j, j:] = np.where(gap <= order,
                                        r[np.minimum(gap, order)], 0.0)
    return bands


def _tv_active_set(z, lam, order, w, maxiter=100):
    """Return the exact total variation solution refined from dual ``w``.

    The dual problem ::

        min_w  0.5 * ||z - D^T w||_2^2  s.t.  |w_i| <= lam

    is solved with a primal-dual active set iteration. Indices where
    ``w + D x / r_0`` leaves ``[-lam, lam]`` are fixed to the bound, on the
    remaining ones ``D x = 0`` is enforced with a banded solve. A repeated
    active set satisfies the optimality conditions exactly.

    Returns ``None`` if no active set repeats within ``maxiter`` steps.
    """
    r = _difference_gram_bands(order)
    Dz = np.diff(z, n=order)
    x = z - _difference_adjoint(w, order)
    upper = lower = None
    for _ in range(maxiter):
        trial = w + np.diff(x, n=order) / r[0]
        new_upper = trial > lam
        new_lower = trial < -lam
        if (upper is not None and np.array_equal(new_upper, upper) and
                np.array_equal(new_lower, lower)):
            return x

        upper, lower = new_upper, new_lower
        w = np.where(upper, lam, np.where(lower, -lam, 0.0))
        free = np.flatnonzero(~(upper | lower))
        if free.size:
            # D x vanishes on the free indices
            Gw = np.diff(_difference_adjoint(w, order), n=order)
            w[free] = scipy.linalg.solveh_banded(
                _difference_gram_banded(free, order), Dz[free] - Gw[free],
                check_finite=False)
        x = z - _difference_adjoint(w, order)

    return None


def block_svt(coeffs, tau):
    """Return the singular value thresholded blocks of ``coeffs``.

    For every block matrix, the singular value decomposition is computed,
    the singular values are soft-thresholded with ``tau`` and the block is
    reconstructed. This is the proximal operator of ``tau`` times the sum
    of the nuclear norms of the blocks.

    Parameters
    ----------
    coeffs : array-like
        Stack of block matrices, shape ``(nblocks, m, K)``.
    tau : non-negative float
        Threshold for the singular values.

    Returns
    -------
    thresholded : `numpy.ndarray`
        Array of the same shape as ``coeffs``.

    Examples
    --------
    >>> blocks = np.array([[[3.0, 0.0], [0.0, 1.0]]])
    >>> np.allclose(block_svt(blocks, 2.0), [[[1.0, 0.0], [0.0, 0.0]]])
    True
    """
    coeffs = np.asarray(coeffs, dtype=float)
    if tau == 0:
        return coeffs.copy()

    u, s, vh = np.linalg.svd(coeffs, full_matrices=False)
    s = soft_threshold(s, tau)
    return np.matmul(u * s[..., None, :], vh)


def nuclear_norm_sum(coeffs):
    """Return the sum of the nuclear norms of all blocks in ``coeffs``.

    Examples
    --------
    >>> blocks = np.array([np.eye(3), 2 * np.eye(3)])
    >>> float(nuclear_norm_sum(blocks))
    9.0
    """
    coeffs = np.asarray(coeffs, dtype=float)
    if coeffs.size == 0:
        return 0.0
    return np.linalg.svd(coeffs, compute_uv=False).sum()


def difference_norm_l1(x, order=2):
    """Return ``||D^k x||_1`` with differences taken along the last axis.

    Examples
    --------
    >>> float(difference_norm_l1([[0.0, 0.0, 1.0, 1.0]]))
    2.0
    """
    x = np.asarray(x, dtype=float)
    if x.shape[-1] <= order:
        return 0.0
    return np.abs(np.diff(x, n=order, axis=-1)).sum()


def proximal_l1(lam=1):
    """Proximal operator factory of the L1 norm ``lam * ||x||_1``.

    Parameters
    ----------
    lam : non-negative float, optional
        Regularization weight.

    Returns
    -------
    prox_factory : function
        Factory for the proximal operator to be initialized with a step
        size ``sigma``. The resulting operator is the soft-thresholding
        with threshold ``sigma * lam``.

    See Also
    --------
    soft_threshold
    """
    lam = float(lam)

    def l1_prox_factory(sigma):
        thresh = float(sigma) * lam

        def proximal(z):
            return soft_threshold(z, thresh)

        return proximal

    return l1_prox_factory


def proximal_total_variation(lam=1, order=2, **kwargs):
    """Proximal operator factory of ``lam * ||D^k x||_1`` for sequences.

    Parameters
    ----------
    lam : non-negative float, optional
        Regularization weight.
    order : positive int, optional
        Order of the finite difference.

    Other Parameters
    ----------------
    kwargs :
        Further keyword arguments passed to `total_variation_denoise`.

    Returns
    -------
    prox_factory : function
        Factory for the proximal operator to be initialized with a step
        size ``sigma``. The resulting operator acts on one-dimensional
        sequences.
    """
    lam = float(lam)

    def tv_prox_factory(sigma):
        weight = float(sigma) * lam

        def proximal(z):
            return total_variation_denoise(z, weight, order=order, **kwargs)

        return proximal

    return tv_prox_factory


def proximal_fused_lasso(lam1=1, lam2=1, order=2, **kwargs):
    r"""Proximal operator factory of the sparse and smooth penalty.

    The penalty on a sequence ``x`` is ::

        lam1 * ||x||_1 + lam2 * ||D^k x||_1

    and its proximal operator is evaluated as total variation denoising
    followed by soft thresholding,

    .. math::
        \mathrm{prox}_{\sigma F}(z) = \mathrm{soft}\big(
            \mathrm{tvd}(z, \sigma \lambda_2), \sigma \lambda_1\big).

    Parameters
    ----------
    lam1 : non-negative float, optional
        Weight of the sparsity of the values.
    lam2 : non-negative float, optional
        Weight of the sparsity of the ``order``-th differences.
    order : positive int, optional
        Order of the finite difference.

    Other Parameters
    ----------------
    kwargs :
        Further keyword arguments passed to `total_variation_denoise`.

    Returns
    -------
    prox_factory : function
        Factory for the proximal operator to be initialized with a step
        size ``sigma``. The resulting operator acts on one-dimensional
        sequences, i.e., on one channel at a time.

    Examples
    --------
    >>> prox = proximal_fused_lasso(lam1=1.0, lam2=0.0)(sigma=0.5)
    >>> prox(np.array([2.0, -0.25, 0.0]))
    array([ 1.5, -0. ,  0. ])
    """
    l1_factory = proximal_l1(lam1)
    tv_factory = proximal_total_variation(lam2, order=order, **kwargs)

    def fused_lasso_prox_factory(sigma):
        prox_l1 = l1_factory(sigma)
        prox_tv = tv_factory(sigma)

        def proximal(z):
            return prox_l1(prox_tv(z))

        return proximal

    return fused_lasso_prox_factory


def proximal_block_nuclear(lam=1):
    """Proximal operator factory of the sum of block nuclear norms.

    Parameters
    ----------
    lam : non-negative float, optional
        Weight of the penalty ``lam * sum_b ||C_b||_*``.

    Returns
    -------
    prox_factory : function
        Factory for the proximal operator to be initialized with a step
        size ``sigma``. The resulting operator acts on stacks of block
        matrices of shape ``(nblocks, m, K)`` and applies `block_svt` with
        threshold ``sigma * lam``.
    """
    lam = float(lam)

    def nuclear_prox_factory(sigma):
        tau = float(sigma) * lam

        def proximal(blocks):
            return block_svt(blocks, tau)

        return proximal

    return nuclear_prox_factory


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
