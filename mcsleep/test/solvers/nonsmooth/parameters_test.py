# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Tests for the McSleep parameter record."""

import pickle

import numpy as np
import pytest

import mcsleep
from mcsleep.solvers import McSleepParams
from mcsleep.util.exceptions import InvalidParameterError


VALID = dict(lam1=0.3, lam2=6.5, lam3=36, K=200, mu=0.5, niter=40)


def _params(**kwargs):
    values = dict(VALID)
    values.update(kwargs)
    return McSleepParams(**values)


def test_defaults():
    """Test default values and conversions."""
    param = _params()
    assert param.O == 100
    assert param.calculate_cost is False
    assert isinstance(param.lam3, float)
    assert isinstance(param.K, int)

    # Aliases of the original names
    assert param.Nit == 40
    assert param.calculateCost is False

    param = _params(K=7)
    assert param.O == 3


def test_integer_valued_floats():
    """Integer valued floats are accepted for integer fields."""
    param = _params(K=8.0, O=np.int64(2), niter=3.0)
    assert (param.K, param.O, param.niter) == (8, 2, 3)


@pytest.mark.parametrize('field, value', [
    ('mu', 0), ('mu', -1.0), ('mu', np.inf),
    ('K', 0), ('K', -4), ('K', 2.5), ('K', '8'),
    ('O', -1), ('O', 200), ('O', 250), ('O', 1.5),
    ('niter', -1), ('niter', 2.5), ('niter', np.nan),
    ('lam1', -0.1), ('lam2', -1), ('lam3', -36), ('lam1', np.nan),
    ('lam2', 'a'), ('calculate_cost', 1), ('calculate_cost', 'yes'),
])
def test_invalid_values(field, value):
    """Every violated precondition raises with the field name."""
    with pytest.raises(InvalidParameterError) as exc:
        _params(**{field: value})
    assert exc.value.field == field
    assert field in str(exc.value)


def test_zero_values_allowed():
    """Zero weights, zero overlap and zero iterations are valid."""
    param = _params(lam1=0, lam2=0, lam3=0, O=0, niter=0)
    assert param.lam1 == param.lam2 == param.lam3 == 0.0
    assert param.O == 0
    assert param.niter == 0


def test_from_dict():
    """Test creation from mappings with original and Python names."""
    original = {'lam1': 0.3, 'lam2': 6.5, 'lam3': 36, 'K': 200, 'O': 100,
                'mu': 0.5, 'Nit': 40, 'calculateCost': True}
    param = McSleepParams.from_dict(original)
    assert param.niter == 40
    assert param.calculate_cost is True

    assert McSleepParams.from_dict(param.as_dict()) == param


def test_from_dict_errors():
    """Unknown, duplicate and missing fields raise."""
    with pytest.raises(InvalidParameterError) as exc:
        McSleepParams.from_dict(dict(VALID, lam4=1.0))
    assert exc.value.field == 'lam4'

    with pytest.raises(InvalidParameterError) as exc:
        McSleepParams.from_dict(dict(VALID, Nit=10))
    assert exc.value.field == 'Nit'

    missing = dict(VALID)
    del missing['mu']
    with pytest.raises(InvalidParameterError) as exc:
        McSleepParams.from_dict(missing)
    assert exc.value.field == 'mu'


def test_equality_and_repr():
    """Test comparison and string representation."""
    param = _params()
    assert param == _params()
    assert param != _params(mu=1.0)
    assert param != 'param'

    assert repr(param) == 'McSleepParams(0.3, 6.5, 36.0, 200, 0.5, 40)'
    assert repr(_params(O=50, calculate_cost=True)) == (
        'McSleepParams(0.3, 6.5, 36.0, 200, 0.5, 40, O=50, '
        'calculate_cost=True)')


def test_error_pickle():
    """The parameter error survives pickling."""
    err = InvalidParameterError('mu', 'must be positive, got 0.0')
    err2 = pickle.loads(pickle.dumps(err))
    assert (err2.field, err2.reason) == (err.field, err.reason)
    assert isinstance(err2, ValueError)


if __name__ == '__main__':
    mcsleep.util.test_file(__file__)
