# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Tests for the solver callbacks."""

import io

import numpy as np

import mcsleep
from mcsleep.solvers.util.callback import (
    Callback, CallbackPrintIteration, CallbackProgressBar, CallbackStore)
from mcsleep.util.testutils import all_equal, skip_if_no_tqdm


def test_callback_store():
    """Iterates are copied and stored with the given step."""
    callback = CallbackStore()
    x = np.zeros(3)
    callback(x)
    x[0] = 1.0
    callback(x)

    assert len(callback) == 2
    assert all_equal(callback[0], np.zeros(3))
    assert all_equal(callback[1], [1.0, 0.0, 0.0])

    callback.reset()
    assert len(callback) == 0

    results = []
    callback = CallbackStore(results, step=2)
    for i in range(5):
        callback(i)
    assert results == [0, 2, 4]
    assert list(callback) == [0, 2, 4]


def test_callback_store_composition():
    """Composition with a function stores derived quantities."""
    callback = CallbackStore() * np.linalg.norm
    callback(np.array([3.0, 4.0]))
    assert callback.callback.results == [5.0]


def test_callback_and():
    """Combined callbacks are called in sequence, plain callables too."""
    store = CallbackStore()
    results = []
    callback = store & results.append
    callback(1)
    callback(2)
    assert store.results == [1, 2]
    assert results == [1, 2]

    callback.reset()
    assert store.results == []


def test_callback_print_iteration(capsys):
    callback = CallbackPrintIteration(fmt='it {}', step=2)
    for _ in range(4):
        callback(None)
    out, _ = capsys.readouterr()
    assert out.split('\n')[:-1] == ['it 0', 'it 2']


@skip_if_no_tqdm
def test_callback_progress_bar():
    callback = CallbackProgressBar(niter=3, file=io.StringIO())
    for _ in range(3):
        callback(None)
    assert callback.pbar.n == 3
    assert repr(callback) == 'CallbackProgressBar(3)'

    # A reset starts a new bar
    callback.reset()
    assert callback.pbar.n == 0


def test_callback_in_solver():
    """Callbacks compose and run inside the solver."""
    y = np.zeros((2, 8))
    param = mcsleep.McSleepParams(lam1=0.1, lam2=0.1, lam3=0.1, K=4, mu=1,
                                  niter=4)
    store = CallbackStore()
    counter = CallbackStore() * (lambda x: 1)
    mcsleep.mcsleep_decompose(y, param, callback=store & counter)
    assert len(store) == 4
    assert counter.callback.results == [1, 1, 1, 1]


def test_callback_receives_transient_estimate():
    """The solver passes the transient estimate of each iteration."""
    y, _, _ = mcsleep.datasets.synthetic_eeg(m=2, n=50, fs=100.0, seed=3)
    param = mcsleep.McSleepParams(lam1=0.1, lam2=0.5, lam3=0.5, K=10, O=5,
                                  mu=0.5, niter=3)
    store = CallbackStore()
    x, _, _ = mcsleep.mcsleep_decompose(y, param, callback=store)
    assert len(store) == 3
    assert all(xi.shape == y.shape for xi in store)
    assert all_equal(store[-1], x)


def test_callback_repr():
    assert repr(Callback()) == 'Callback()'
    assert repr(CallbackStore(step=2)) == 'CallbackStore(step=2)'
    assert (repr(CallbackPrintIteration() & CallbackStore()) ==
            'CallbackPrintIteration() & CallbackStore()')


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
