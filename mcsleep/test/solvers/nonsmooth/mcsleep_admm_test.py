# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for the McSleep ADMM solver."""

import numpy as np
import pytest

import mcsleep
from mcsleep.datasets import synthetic_eeg
from mcsleep.solvers import (
    Callback, CallbackStore, McSleepParams, block_svt, mcsleep_cost,
    mcsleep_decompose, proximal_block_nuclear, proximal_fused_lasso,
    soft_threshold, total_variation_denoise)
from mcsleep.trafos import block_transform, block_transform_adjoint
from mcsleep.util.exceptions import (
    BlockGeometryError, FrameIdentityError, InvalidParameterError)
from mcsleep.util.testutils import all_almost_equal, all_equal, noise_array


H = block_transform
HT = block_transform_adjoint


def _param(**kwargs):
    values = dict(lam1=0.3, lam2=6.5, lam3=36, K=20, O=10, mu=0.5,
                  niter=10, calculate_cost=False)
    values.update(kwargs)
    return McSleepParams(**values)


def _reference_mcsleep(y, param):
    """Plain sequential version of the iteration, for comparison."""
    K, O, mu = param.K, param.O, param.mu
    x = np.zeros_like(y)
    u = np.zeros_like(y)
    d1 = np.zeros_like(y)
    v = H(x, K, O)
    d2 = v.copy()
    for _ in range(param.niter):
        x = np.array([soft_threshold(
            total_variation_denoise(row, param.lam2 / mu), param.lam1 / mu)
            for row in u - d1])
        c = block_svt(v - d2, param.lam3 / mu)
        g1 = y / mu + x + d1
        g2 = H(y, K, O) / mu + c + d2
        tmp = g1 + HT(g2, K, O)
        u = g1 - tmp / (mu + 2)
        v = g2 - H(tmp, K, O) / (mu + 2)
        d1 = d1 - (u - x)
        d2 = d2 - (v - c)
    return x, HT(c, K, O)


def test_mcsleep_shapes():
    """Outputs have the shape of the input."""
    y = noise_array((3, 110), seed=0)
    x, s, cost = mcsleep.mcsleep(y, H, HT, _param(niter=4))
    assert x.shape == s.shape == y.shape
    assert cost.shape == (4,)
    assert all_equal(cost, np.zeros(4))


def test_mcsleep_input_not_modified():
    y = noise_array((2, 40), seed=1)
    y_copy = y.copy()
    mcsleep.mcsleep(y, H, HT, _param(niter=2))
    assert all_equal(y, y_copy)


def test_mcsleep_zero_iterations():
    """Zero iterations give zero components and an empty cost history."""
    y = noise_array((2, 40), seed=2)
    x, s, cost = mcsleep.mcsleep(y, H, HT, _param(niter=0,
                                                  calculate_cost=True))
    assert all_equal(x, np.zeros_like(y))
    assert all_equal(s, np.zeros_like(y))
    assert cost.shape == (0,)


def test_mcsleep_zero_input():
    """Zero data with zero weights gives zero output and zero cost."""
    y = np.zeros((2, 40))
    param = _param(lam1=0, lam2=0, lam3=0, mu=1, niter=1,
                   calculate_cost=True)
    x, s, cost = mcsleep.mcsleep(y, H, HT, param)
    assert all_equal(x, np.zeros_like(y))
    assert all_equal(s, np.zeros_like(y))
    assert cost[0] == 0


def test_mcsleep_zero_weights_first_iteration():
    """With zero weights the proximal steps are identities.

    In the first iteration ``x = u - d1 = 0`` and ``c = v - d2 = 0``,
    after which the least squares step splits ``y`` between both
    components.
    """
    y = noise_array((2, 40), seed=3)
    mu = 1.0
    param = _param(lam1=0, lam2=0, lam3=0, mu=mu, niter=1)
    x, s, _ = mcsleep.mcsleep(y, H, HT, param)
    assert all_equal(x, np.zeros_like(y))
    assert all_equal(s, np.zeros_like(y))

    # Second iteration: x = u - d1 and c = v - d2 from the first one
    g1 = y / mu
    tmp = g1 + HT(H(y, 20, 10) / mu, 20, 10)
    u = g1 - tmp / (mu + 2)
    v = H(y, 20, 10) / mu - H(tmp, 20, 10) / (mu + 2)
    d1 = -u
    d2 = -v

    x, s, _ = mcsleep.mcsleep(y, H, HT, _param(lam1=0, lam2=0, lam3=0,
                                               mu=mu, niter=2))
    assert all_almost_equal(x, u - d1, ndigits=10)
    assert all_almost_equal(s, HT(v - d2, 20, 10), ndigits=10)


def test_mcsleep_matches_reference():
    """Compare with a plain implementation of the iteration."""
    y, _, _ = synthetic_eeg(m=3, n=210, fs=100.0, seed=4)
    param = _param(niter=5)
    x, s, _ = mcsleep.mcsleep(y, H, HT, param)
    x_ref, s_ref = _reference_mcsleep(y, param)
    assert all_almost_equal(x, x_ref, ndigits=10)
    assert all_almost_equal(s, s_ref, ndigits=10)


def test_mcsleep_cost_decreases():
    """The final cost is not larger than the first one."""
    y, _, _ = synthetic_eeg(m=3, n=410, fs=100.0, noise=0.05, seed=5)
    param = _param(lam1=0.05, lam2=0.5, lam3=1.0, mu=0.5, niter=30,
                   calculate_cost=True)
    _, _, cost = mcsleep.mcsleep(y, H, HT, param)
    assert len(cost) == 30
    assert np.all(cost > 0)
    assert cost[-1] <= cost[0]


def test_mcsleep_cost_matches_function():
    """The stored cost equals `mcsleep_cost` of the final iterate."""
    y = noise_array((2, 60), seed=6)
    param = _param(niter=3, calculate_cost=True)

    class IterateStore(Callback):
        def __call__(self, x):
            self.x = x.copy()

    # Record the block coefficients produced by the low rank step
    coeffs = []

    def prox_c(sigma):
        prox = proximal_block_nuclear(param.lam3)(sigma)

        def proximal(blocks):
            result = prox(blocks)
            coeffs.append(result)
            return result

        return proximal

    callback = IterateStore()
    x, s, cost = mcsleep.mcsleep(y, H, HT, param, callback=callback,
                                 prox_c=prox_c)
    assert len(coeffs) == 3
    c = coeffs[-1]
    assert all_almost_equal(s, HT(c, param.K, param.O))
    assert cost[-1] == pytest.approx(mcsleep_cost(y, x, c, HT, param))
    assert all_equal(callback.x, x)


def test_mcsleep_cost_entrywise_norms():
    """The cost sums absolute values and time differences over channels."""
    x = np.array([[0.0, 0.0, 1.0, 1.0],
                  [0.0, 1.0, 2.0, 3.0]])
    param = _param(lam1=1.0, lam2=1.0, lam3=1.0, K=4, O=0)
    c = np.zeros_like(H(x, 4, 0))

    # sum |x| = 8, second differences along time: [1, -1] and [0, 0]
    assert mcsleep_cost(x, x, c, HT, param) == pytest.approx(10.0)
    assert (mcsleep_cost(x, x, c, HT, _param(lam1=1.0, lam2=0.0, K=4, O=0))
            == pytest.approx(8.0))


def test_mcsleep_reconstruction():
    """Both components together approximate the data."""
    y, x_true, _ = synthetic_eeg(m=3, n=410, fs=100.0, njumps=3,
                                 noise=0.0, seed=7)
    param = _param(lam1=0.01, lam2=0.1, lam3=0.2, mu=0.5, niter=100)
    x, s, _ = mcsleep.mcsleep(y, H, HT, param)

    residual = np.linalg.norm(y - x - s) / np.linalg.norm(y)
    assert residual < 0.2

    # The transient component follows the true one closely
    assert np.linalg.norm(x - x_true) < np.linalg.norm(x_true)


def test_mcsleep_transient_support():
    """The transient component is concentrated on the true pulses."""
    y, x_true, _ = synthetic_eeg(m=3, n=410, fs=100.0, njumps=3,
                                 lowpass=0.0, noise=0.0, seed=7)
    param = _param(lam1=0.05, lam2=0.2, lam3=0.5, mu=0.5, niter=100)
    x, _, _ = mcsleep.mcsleep(y, H, HT, param)

    support = x_true != 0
    assert np.any(support) and np.any(~support)
    assert (np.mean(np.abs(x[support])) >
            5 * np.mean(np.abs(x[~support])))

    # The largest transient values lie on the pulses
    large = np.abs(x) > 0.5 * np.max(np.abs(x))
    assert np.mean(support[large]) > 0.8


def test_mcsleep_deterministic():
    """Repeated calls give identical results."""
    y = noise_array((3, 60), seed=8)
    param = _param(niter=5, calculate_cost=True)
    result1 = mcsleep.mcsleep(y, H, HT, param)
    result2 = mcsleep.mcsleep(y, H, HT, param)
    for r1, r2 in zip(result1, result2):
        assert all_equal(r1, r2)


def test_mcsleep_parallel(mcsleep_n_jobs):
    """The number of workers does not change the result."""
    y = noise_array((4, 110), seed=9)
    param = _param(niter=5)
    x1, s1, _ = mcsleep.mcsleep(y, H, HT, param)
    x2, s2, _ = mcsleep.mcsleep(y, H, HT, param, n_jobs=mcsleep_n_jobs)
    assert all_almost_equal(x1, x2, ndigits=12)
    assert all_almost_equal(s1, s2, ndigits=12)


def test_mcsleep_param_mapping():
    """Parameters can be given as mapping with the original names."""
    y = noise_array((2, 40), seed=10)
    param = {'lam1': 0.3, 'lam2': 6.5, 'lam3': 36, 'K': 20, 'O': 10,
             'mu': 0.5, 'Nit': 3, 'calculateCost': True}
    x1, s1, cost1 = mcsleep.mcsleep(y, H, HT, param)
    x2, s2, cost2 = mcsleep.mcsleep(y, H, HT,
                                    McSleepParams.from_dict(param))
    assert all_equal(x1, x2)
    assert all_equal(cost1, cost2)

    with pytest.raises(InvalidParameterError):
        mcsleep.mcsleep(y, H, HT, dict(param, mu=0))
    with pytest.raises(TypeError):
        mcsleep.mcsleep(y, H, HT, 0.5)


def test_mcsleep_callback():
    """The callback is called once per iteration with the iterate."""
    y = noise_array((2, 40), seed=11)
    store = CallbackStore()
    x, _, _ = mcsleep.mcsleep(y, H, HT, _param(niter=7), callback=store)
    assert len(store) == 7
    assert all_equal(store[-1], x)

    with pytest.raises(TypeError):
        mcsleep.mcsleep(y, H, HT, _param(), callback=1)


def test_mcsleep_custom_prox():
    """Passing the default factories explicitly gives the same result."""
    y = noise_array((2, 40), seed=12)
    param = _param(niter=3)
    x1, s1, _ = mcsleep.mcsleep(y, H, HT, param)
    x2, s2, _ = mcsleep.mcsleep(
        y, H, HT, param, prox_x=proximal_fused_lasso(param.lam1, param.lam2))
    assert all_equal(x1, x2)
    assert all_equal(s1, s2)


def test_mcsleep_geometry_errors():
    """Incompatible signals raise `BlockGeometryError`."""
    with pytest.raises(BlockGeometryError):
        mcsleep.mcsleep(np.zeros((2, 45)), H, HT, _param())
    with pytest.raises(BlockGeometryError):
        mcsleep.mcsleep(np.zeros((2, 10)), H, HT, _param())
    with pytest.raises(BlockGeometryError):
        mcsleep.mcsleep(np.zeros(40), H, HT, _param())

    def bad_adjoint(c, K, O):
        return HT(c, K, O)[:, :-1]

    with pytest.raises(BlockGeometryError):
        mcsleep.mcsleep(np.zeros((2, 40)), H, bad_adjoint, _param())


def test_mcsleep_frame_error():
    """A transform pair that is not a Parseval frame is rejected."""
    def scaled(y, K, O):
        return 2 * H(y, K, O)

    y = noise_array((2, 40), seed=13)
    with pytest.raises(FrameIdentityError):
        mcsleep.mcsleep(y, scaled, HT, _param())

    # Skipping the check runs the iteration anyway
    x, s, _ = mcsleep.mcsleep(y, scaled, HT, _param(niter=1),
                              check_frame=False)
    assert x.shape == y.shape


def test_mcsleep_transform_type_errors():
    y = np.zeros((2, 40))
    with pytest.raises(TypeError):
        mcsleep.mcsleep(y, None, HT, _param())
    with pytest.raises(TypeError):
        mcsleep.mcsleep(y, H, 'HT', _param())


def test_mcsleep_decompose():
    """The convenience function uses the block transform."""
    y = noise_array((2, 40), seed=14)
    param = _param(niter=3)
    x1, s1, _ = mcsleep.mcsleep(y, H, HT, param)
    x2, s2, _ = mcsleep_decompose(y, param)
    assert all_equal(x1, x2)
    assert all_equal(s1, s2)


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
