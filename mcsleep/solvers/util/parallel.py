# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Parallel maps over channels and blocks.

The maps return only after all results are available, so callers can rely
on fully materialized arrays.
"""

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs


__all__ = ('worker_pool', 'parallel_map_rows', 'parallel_map_blocks')


def worker_pool(n_jobs=1):
    """Return a reusable thread pool for the parallel maps.

    Parameters
    ----------
    n_jobs : int, optional
        Number of workers, with the conventions of `joblib.Parallel`
        (``-1`` means all processors). ``1`` runs sequentially.

    Returns
    -------
    pool : `joblib.Parallel`
        Pool to be used as context manager, so that the workers are kept
        alive across several maps::

            with worker_pool(4) as pool:
                for _ in range(niter):
                    parallel_map_rows(func, arr, pool)
    """
    return Parallel(n_jobs=n_jobs, prefer='threads')


def parallel_map_rows(func, arr, pool=None):
    """Apply ``func`` to each row of ``arr`` and stack the results.

    Parameters
    ----------
    func : callable
        Function mapping a one-dimensional array to an array of the same
        length.
    arr : `numpy.ndarray`
        Two-dimensional array whose rows are processed independently.
    pool : `joblib.Parallel`, optional
        Pool to run the map on. ``None`` runs sequentially.

    Returns
    -------
    result : `numpy.ndarray`
        Array with ``result[j] == func(arr[j])``.

    Examples
    --------
    >>> parallel_map_rows(np.cumsum, np.ones((2, 3)))
    array([[1., 2., 3.],
           [1., 2., 3.]])
    """
    if pool is None:
        rows = [func(row) for row in arr]
    else:
        rows = pool(delayed(func)(row) for row in arr)

    result = np.stack(rows)
    if result.shape != arr.shape:
        raise ValueError('row function changed the shape from {} to {}'
                         ''.format(arr.shape, result.shape))
    return result


def parallel_map_blocks(func, blocks, pool=None, nchunks=None):
    """Apply ``func`` to chunks of a stack of blocks and concatenate.

    Parameters
    ----------
    func : callable
        Function mapping a stack of blocks of shape ``(k, m, K)`` to an
        array of the same shape. It must treat blocks independently.
    blocks : `numpy.ndarray`
        Stack of blocks, the first axis enumerating them.
    pool : `joblib.Parallel`, optional
        Pool to run the map on. ``None`` runs sequentially on the whole
        stack at once.
    nchunks : positive int, optional
        Number of chunks the stack is split into.
        Default: number of workers of ``pool``

    Returns
    -------
    result : `numpy.ndarray`
        Concatenation of ``func`` applied to all chunks.
    """
    if pool is None:
        result = np.asarray(func(blocks))
    else:
        if nchunks is None:
            nchunks = effective_n_jobs(pool.n_jobs)
        nchunks = max(1, min(int(nchunks), len(blocks)))
        chunks = np.array_split(blocks, nchunks, axis=0)
        parts = pool(delayed(func)(chunk) for chunk in chunks)
        result = np.concatenate(parts, axis=0)

    if result.shape != blocks.shape:
        raise ValueError('block function changed the shape from {} to {}'
                         ''.format(blocks.shape, result.shape))
    return result


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
