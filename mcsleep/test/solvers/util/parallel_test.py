# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Tests for the parallel maps over channels and blocks."""

import numpy as np
import pytest

import mcsleep
from mcsleep.solvers.nonsmooth.proximal_operators import block_svt
from mcsleep.solvers.util.parallel import (
    parallel_map_blocks, parallel_map_rows, worker_pool)
from mcsleep.util.testutils import all_almost_equal, all_equal, noise_array


def test_map_rows(mcsleep_n_jobs):
    """Rows are processed independently and stacked in order."""
    arr = noise_array((5, 12), seed=0)
    expected = np.cumsum(arr, axis=1)

    assert all_equal(parallel_map_rows(np.cumsum, arr), expected)
    with worker_pool(mcsleep_n_jobs) as pool:
        assert all_equal(parallel_map_rows(np.cumsum, arr, pool), expected)


def test_map_rows_shape_error():
    arr = np.ones((2, 4))
    with pytest.raises(ValueError):
        parallel_map_rows(lambda row: row[:-1], arr)


def test_map_blocks(mcsleep_n_jobs):
    """Chunked block maps agree with the map over the whole stack."""
    blocks = noise_array((7, 3, 4), seed=1)
    expected = block_svt(blocks, 0.5)

    def func(chunk):
        return block_svt(chunk, 0.5)

    assert all_equal(parallel_map_blocks(func, blocks), expected)
    with worker_pool(mcsleep_n_jobs) as pool:
        result = parallel_map_blocks(func, blocks, pool)
        assert all_almost_equal(result, expected, ndigits=12)

        # More chunks than blocks
        result = parallel_map_blocks(func, blocks, pool, nchunks=20)
        assert all_almost_equal(result, expected, ndigits=12)


def test_map_blocks_shape_error():
    blocks = np.ones((3, 2, 2))
    with pytest.raises(ValueError):
        parallel_map_blocks(lambda chunk: chunk[:, 0], blocks)


def test_pool_reused():
    """One pool serves several maps."""
    arr = np.arange(6.0).reshape(2, 3)
    with worker_pool(2) as pool:
        for _ in range(3):
            assert all_equal(parallel_map_rows(np.negative, arr, pool), -arr)


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
