# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Testing utilities."""

import os
from itertools import zip_longest

import numpy as np

from mcsleep.util.utility import is_string


__all__ = (
    'dtype_ndigits',
    'dtype_tol',
    'all_equal',
    'all_almost_equal',
    'skip_if_no_tqdm',
    'simple_fixture',
    'noise_array',
    'test',
    'run_doctests',
    'test_file',
)


def _ndigits(a, b, default=None):
    """Return number of expected correct digits comparing ``a`` and ``b``.

    The returned number is the minimum `dtype_ndigits` of the two objects.
    """
    dtype1 = getattr(a, 'dtype', object)
    dtype2 = getattr(b, 'dtype', object)
    return min(dtype_ndigits(dtype1, default), dtype_ndigits(dtype2, default))


def dtype_ndigits(dtype, default=None):
    """Return the number of correct digits expected for a given dtype.

    This is intended as a somewhat generous default (relative) precision for
    results of more or less stable computations.

    Returned numbers:

    - ``np.float16``: ``1``
    - ``np.float32``: ``3``
    - Others: ``default`` if given, otherwise ``5``
    """
    if dtype == np.float16:
        return 1
    elif dtype == np.float32:
        return 3
    else:
        return default if default is not None else 5


def dtype_tol(dtype, default=None):
    """Return a tolerance for a given dtype.

    See Also
    --------
    dtype_ndigits : Same tolerance expressed in number of digits.
    """
    return 10 ** -dtype_ndigits(dtype, default)


def all_equal(iter1, iter2):
    """Return ``True`` if all elements in ``a`` and ``b`` are equal."""
    if hasattr(iter1, '__array__') and hasattr(iter2, '__array__'):
        a1, a2 = np.asarray(iter1), np.asarray(iter2)
        return a1.shape == a2.shape and bool(np.all(a1 == a2))

    # Direct comparison for scalars, tuples or lists
    try:
        if iter1 == iter2:
            return True
    except ValueError:  # Raised by NumPy when comparing arrays
        pass

    if iter1 is None and iter2 is None:
        return True

    try:
        it1 = iter(iter1)
        it2 = iter(iter2)
    except TypeError:
        return False

    diff_length_sentinel = object()
    for [ip1, ip2] in zip_longest(it1, it2, fillvalue=diff_length_sentinel):
        if ip1 is diff_length_sentinel or ip2 is diff_length_sentinel:
            return False

        if not all_equal(ip1, ip2):
            return False

    return True


def all_almost_equal_array(v1, v2, ndigits):
    return np.allclose(v1, v2,
                       rtol=10 ** -ndigits, atol=10 ** -ndigits,
                       equal_nan=True)


def all_almost_equal(iter1, iter2, ndigits=None):
    """Return ``True`` if all elements in ``a`` and ``b`` are almost equal."""
    if iter1 is None and iter2 is None:
        return True

    if hasattr(iter1, '__array__') or hasattr(iter2, '__array__'):
        # Only get default ndigits if comparing arrays, need to keep `None`
        # otherwise for recursive calls.
        if ndigits is None:
            ndigits = _ndigits(iter1, iter2, None)
        return all_almost_equal_array(iter1, iter2, ndigits)

    try:
        it1 = iter(iter1)
        it2 = iter(iter2)
    except TypeError:
        if ndigits is None:
            ndigits = _ndigits(iter1, iter2, None)
        return bool(np.isclose(iter1, iter2,
                               atol=10 ** -ndigits, rtol=10 ** -ndigits,
                               equal_nan=True))

    diff_length_sentinel = object()
    for [ip1, ip2] in zip_longest(it1, it2, fillvalue=diff_length_sentinel):
        if ip1 is diff_length_sentinel or ip2 is diff_length_sentinel:
            return False

        if not all_almost_equal(ip1, ip2, ndigits):
            return False

    return True


try:
    # Try catch in case user does not have pytest
    import pytest

except ImportError:

    def identity(*args, **kwargs):
        if args and callable(args[0]):
            return args[0]
        else:
            return identity

    skip_if_no_tqdm = identity

else:
    try:
        import tqdm  # noqa: F401
    except ImportError:
        TQDM_AVAILABLE = False
    else:
        TQDM_AVAILABLE = True

    skip_if_no_tqdm = pytest.mark.skipif(
        not TQDM_AVAILABLE, reason='tqdm not available')


def simple_fixture(name, params, fmt=None):
    """Helper to create a pytest fixture using only name and params.

    Parameters
    ----------
    name : str
        Name of the parameters used for the ``ids`` argument
        to `pytest.fixture`.
    params : sequence
        Values to be taken as parameters in the fixture.
    fmt : str, optional
        Use this format string for the generation of the ``ids``.
        For each value, the id string is generated as ::

            fmt.format(name=name, value=value)

        hence the format string must use ``{name}`` and ``{value}``.
        Default format strings are:

            - ``" {name}='{value}' "`` for string parameters,
            - ``" {name}={value} "`` for other types.
    """
    import pytest

    if fmt is None:
        fmt_str = " {name}='{value}' "
        fmt_default = " {name}={value} "

        ids = []
        for p in params:
            if is_string(p):
                ids.append(fmt_str.format(name=name, value=p))
            else:
                ids.append(fmt_default.format(name=name, value=p))
    else:
        ids = [fmt.format(name=name, value=p) for p in params]

    wrapper = pytest.fixture(scope='module', ids=ids, params=params)
    return wrapper(lambda request: request.param)


def noise_array(shape, dtype='float64', seed=None):
    """Generate a white noise array of given shape.

    The array contains white noise with standard deviation 1.

    Parameters
    ----------
    shape : int or sequence of ints
        Shape of the returned array.
    dtype : optional
        Floating point data type of the returned array.
    seed : int, optional
        Seed for a dedicated random generator. ``None`` uses the global
        NumPy random state.

    Returns
    -------
    noise_array : `numpy.ndarray`

    Examples
    --------
    >>> noise_array((2, 3)).shape
    (2, 3)
    """
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise ValueError('bad dtype {}'.format(dtype))

    rng = np.random if seed is None else np.random.RandomState(seed)
    return rng.standard_normal(shape).astype(dtype, copy=False)


def test(arguments=None):
    """Run McSleep tests given by arguments."""
    try:
        import pytest
    except ImportError:
        raise ImportError(
            'McSleep tests cannot be run without `pytest` installed.\n'
            'Run `$ pip install [--user] mcsleep[testing]` in order to '
            'install `pytest`.'
        )

    this_dir = os.path.dirname(__file__)
    pkg_root = os.path.abspath(os.path.join(this_dir, os.pardir))

    args = [pkg_root]
    if arguments is not None:
        args.extend(arguments)

    pytest.main(args)


def run_doctests(skip_if=False, **kwargs):
    """Run all doctests in the current module.

    This function calls ``doctest.testmod()``, by default with the options
    ``optionflags=doctest.NORMALIZE_WHITESPACE`` and
    ``extraglobs={'mcsleep': mcsleep, 'np': np}``. This can be changed with
    keyword arguments.

    Parameters
    ----------
    skip_if : bool
        For ``True``, skip the doctests in this module.
    kwargs :
        Extra keyword arguments passed on to the ``doctest.testmod``
        function.
    """
    from doctest import testmod, NORMALIZE_WHITESPACE, SKIP
    import mcsleep

    optionflags = kwargs.pop('optionflags', NORMALIZE_WHITESPACE)
    if skip_if:
        optionflags |= SKIP

    extraglobs = kwargs.pop('extraglobs', {'mcsleep': mcsleep, 'np': np})
    testmod(optionflags=optionflags, extraglobs=extraglobs, **kwargs)


def test_file(file, args=None):
    """Run tests in file with proper default arguments."""
    try:
        import pytest
    except ImportError:
        raise ImportError('McSleep tests cannot be run without `pytest` '
                          'installed.\nRun `$ pip install [--user] '
                          'mcsleep[testing]` in order to install `pytest`.')

    if args is None:
        args = []

    args.extend([str(file.replace('\\', '/')), '-v', '--capture=sys'])

    pytest.main(args)


if __name__ == '__main__':
    run_doctests()
