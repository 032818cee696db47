# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Parameter record of the McSleep decomposition."""

import numbers

import numpy as np

from mcsleep.util.exceptions import InvalidParameterError
from mcsleep.util.utility import signature_string


__all__ = ('McSleepParams',)


def _real(field, value, positive=False):
    """Return ``value`` as finite float, raise for invalid values."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(
            field, 'must be a real number, got {!r}'.format(value))
    value = float(value)
    if not np.isfinite(value):
        raise InvalidParameterError(
            field, 'must be finite, got {}'.format(value))
    if positive and value <= 0:
        raise InvalidParameterError(
            field, 'must be positive, got {}'.format(value))
    if value < 0:
        raise InvalidParameterError(
            field, 'must be non-negative, got {}'.format(value))
    return value


def _integer(field, value):
    """Return ``value`` as int, raise for non-integers."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(
            field, 'must be an integer, got {!r}'.format(value))
    if not np.isfinite(value) or int(value) != value:
        raise InvalidParameterError(
            field, 'must be an integer, got {!r}'.format(value))
    return int(value)


class McSleepParams(object):

    """Parameters of the McSleep decomposition.

    All values are validated on construction; every violated
    precondition raises an `InvalidParameterError` naming the field.

    Attributes
    ----------
    lam1 : float
        Weight of the sparsity of the transient component.
    lam2 : float
        Weight of the sparsity of the second order differences of the
        transient component.
    lam3 : float
        Weight of the sum of nuclear norms of the oscillatory blocks.
    K : int
        Block length.
    O : int
        Overlap between consecutive blocks.
    mu : float
        Step size parameter of the augmented Lagrangian.
    niter : int
        Number of iterations.
    calculate_cost : bool
        Whether to evaluate the cost function in each iteration.
    """

    # Names used by the original McSleep code
    aliases = {'Nit': 'niter', 'calculateCost': 'calculate_cost'}

    def __init__(self, lam1, lam2, lam3, K, mu, niter, O=None,
                 calculate_cost=False):
        """Initialize a new instance.

        Parameters
        ----------
        lam1, lam2, lam3 : non-negative float
            Regularization weights of the transient values, the transient
            second differences and the block ranks, respectively.
        K : positive int
            Block length.
        mu : positive float
            Step size parameter of the augmented Lagrangian.
        niter : non-negative int
            Number of iterations.
        O : int, optional
            Overlap between consecutive blocks, ``0 <= O < K``.
            Default: ``K // 2``
        calculate_cost : bool, optional
            If ``True``, evaluate the cost function in each iteration.

        Examples
        --------
        >>> param = McSleepParams(lam1=0.3, lam2=6.5, lam3=36, K=200,
        ...                       mu=0.5, niter=40)
        >>> param.O
        100
        """
        self.lam1 = _real('lam1', lam1)
        self.lam2 = _real('lam2', lam2)
        self.lam3 = _real('lam3', lam3)

        self.K = _integer('K', K)
        if self.K <= 0:
            raise InvalidParameterError(
                'K', 'must be positive, got {}'.format(self.K))

        if O is None:
            self.O = self.K // 2
        else:
            self.O = _integer('O', O)
            if not 0 <= self.O < self.K:
                raise InvalidParameterError(
                    'O', 'must satisfy 0 <= O < K = {}, got {}'
                    ''.format(self.K, self.O))

        self.mu = _real('mu', mu, positive=True)

        self.niter = _integer('niter', niter)
        if self.niter < 0:
            raise InvalidParameterError(
                'niter', 'must be non-negative, got {}'.format(self.niter))

        if not isinstance(calculate_cost, (bool, np.bool_)):
            raise InvalidParameterError(
                'calculate_cost', 'must be a boolean, got {!r}'
                ''.format(calculate_cost))
        self.calculate_cost = bool(calculate_cost)

    @classmethod
    def from_dict(cls, mapping):
        """Create parameters from a mapping.

        Both the attribute names of this class and the names of the
        original McSleep code (``Nit``, ``calculateCost``) are recognized.

        Parameters
        ----------
        mapping : mapping
            Parameter names and values.

        Returns
        -------
        param : `McSleepParams`

        Raises
        ------
        InvalidParameterError
            For unknown, duplicate or missing fields and invalid values.

        Examples
        --------
        >>> param = McSleepParams.from_dict(
        ...     {'lam1': 0.3, 'lam2': 6.5, 'lam3': 36, 'K': 200, 'O': 100,
        ...      'mu': 0.5, 'Nit': 40, 'calculateCost': True})
        >>> param.niter, param.calculate_cost
        (40, True)
        """
        known = ('lam1', 'lam2', 'lam3', 'K', 'mu', 'niter', 'O',
                 'calculate_cost')
        required = ('lam1', 'lam2', 'lam3', 'K', 'mu', 'niter')

        kwargs = {}
        for key, value in dict(mapping).items():
            name = cls.aliases.get(key, key)
            if name not in known:
                raise InvalidParameterError(key, 'is not a recognized '
                                                 'parameter')
            if name in kwargs:
                raise InvalidParameterError(key, 'is given more than once')
            kwargs[name] = value

        for name in required:
            if name not in kwargs:
                raise InvalidParameterError(name, 'is required')

        return cls(**kwargs)

    @property
    def Nit(self):
        """Alias for `niter`."""
        return self.niter

    @property
    def calculateCost(self):
        """Alias for `calculate_cost`."""
        return self.calculate_cost

    def as_dict(self):
        """Return the parameters as a new `dict`."""
        return {'lam1': self.lam1, 'lam2': self.lam2, 'lam3': self.lam3,
                'K': self.K, 'mu': self.mu, 'niter': self.niter,
                'O': self.O, 'calculate_cost': self.calculate_cost}

    def __eq__(self, other):
        """Return ``self == other``."""
        if not isinstance(other, McSleepParams):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    __hash__ = None

    def __repr__(self):
        """Return ``repr(self)``.

        Examples
        --------
        >>> McSleepParams(lam1=1, lam2=2, lam3=3, K=4, mu=0.5, niter=10)
        McSleepParams(1.0, 2.0, 3.0, 4, 0.5, 10)
        """
        posargs = [self.lam1, self.lam2, self.lam3, self.K, self.mu,
                   self.niter]
        optargs = [('O', self.O, self.K // 2),
                   ('calculate_cost', self.calculate_cost, False)]
        inner_str = signature_string(posargs, optargs)
        return '{}({})'.format(self.__class__.__name__, inner_str)


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
