# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import numpy as np

import mcsleep
from mcsleep.util.testutils import all_almost_equal, all_equal, dtype_tol
from mcsleep.util.utility import is_string, signature_string


# ---- String helpers ---- #


def test_is_string():
    assert is_string('abc')
    assert not is_string(1)


def test_signature_string():
    assert signature_string([1, 'a'], []) == "1, 'a'"
    assert signature_string([], [('step', 2, 1)]) == 'step=2'
    assert signature_string([0.25], [('step', 1, 1)]) == '0.25'
    assert signature_string([1, 2], [('k', 3, 0)],
                            sep=(';', '|', ' / ')) == '1;2 / k=3'


# ---- Test helpers ---- #


def test_all_equal():
    assert all_equal([1, 2], (1, 2))
    assert all_equal(np.ones(3), np.ones(3))
    assert not all_equal(np.ones(3), np.ones(4))
    assert not all_equal([1, 2], [1, 2, 3])


def test_all_almost_equal():
    assert all_almost_equal(np.ones(3), np.ones(3) + 1e-7)
    assert not all_almost_equal(np.ones(3), np.ones(3) + 1e-3)
    assert all_almost_equal(1.0, 1.0 + 1e-3, ndigits=2)
    assert all_almost_equal(None, None)


def test_all_almost_equal_broadcast():
    """Arrays are compared with scalars and rows by broadcasting."""
    assert all_almost_equal(np.full(4, 0.5), 0.5)
    assert all_almost_equal(np.full(4, 0.5), np.float64(0.5))
    assert not all_almost_equal(np.array([0.5, 0.6]), 0.5)
    assert all_almost_equal(np.ones((2, 3)), np.ones(3))


def test_dtype_tol():
    assert dtype_tol(np.float32) == 1e-3
    assert dtype_tol(np.float64) == 1e-5


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
