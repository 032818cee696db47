# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Callbacks called by `mcsleep` with the transient estimate of each iteration.

Solvers do not print or log by themselves. Progress is reported, and
iterates are collected, by passing one of the callbacks below, or a
combination ``cb1 & cb2``, as ``callback`` argument.
"""

import copy

from mcsleep.util.utility import signature_string

__all__ = ('Callback', 'CallbackStore', 'CallbackPrintIteration',
           'CallbackProgressBar')


class Callback(object):

    """Base class of the callbacks.

    Subclasses implement ``__call__(x)`` and, if they keep state between
    iterations, `reset`.
    """

    def __call__(self, x):
        """Act on the transient estimate ``x`` of the current iteration."""

    def __and__(self, other):
        """Return ``self & other``, calling both callbacks in turn.

        Examples
        --------
        >>> CallbackStore() & CallbackPrintIteration()
        CallbackStore() & CallbackPrintIteration()
        """
        return _CallbackAnd(self, other)

    def __mul__(self, function):
        """Return ``self * function``, calling ``self(function(x))``.

        Examples
        --------
        Keep the number of nonzero transient samples per iteration:

        >>> nonzeros = CallbackStore() * np.count_nonzero
        >>> nonzeros(np.array([[0.0, 1.5], [0.0, -2.0]]))
        >>> [int(k) for k in nonzeros.callback]
        [2]
        """
        return _CallbackCompose(self, function)

    def reset(self):
        """Restore the state before the first iteration."""

    def __repr__(self):
        """Return ``repr(self)``."""
        return '{}()'.format(self.__class__.__name__)


class _CallbackAnd(Callback):

    """Sequence of callbacks, plain functions are accepted as well."""

    def __init__(self, *callbacks):
        self.callbacks = callbacks

    def __call__(self, x):
        for callback in self.callbacks:
            callback(x)

    def reset(self):
        for callback in self.callbacks:
            if isinstance(callback, Callback):
                callback.reset()

    def __repr__(self):
        return ' & '.join(repr(callback) for callback in self.callbacks)


class _CallbackCompose(Callback):

    """Callback applied to a function of the iterate."""

    def __init__(self, callback, function):
        self.callback = callback
        self.function = function

    def __call__(self, x):
        self.callback(self.function(x))

    def reset(self):
        if isinstance(self.callback, Callback):
            self.callback.reset()

    def __repr__(self):
        return '{!r} * {!r}'.format(self.callback, self.function)


class CallbackStore(Callback):

    """Collect the transient estimates of a decomposition.

    The iterates are copied, so later iterations do not change stored ones.
    Compose with a function to keep a derived quantity instead, e.g., the
    norm of the transient component.
    """

    def __init__(self, results=None, step=1):
        """Initialize a new instance.

        Parameters
        ----------
        results : list, optional
            List the iterates are appended to. Default: new list
        step : positive int, optional
            Store every ``step``-th iterate, starting with the first.

        Examples
        --------
        >>> store = CallbackStore(step=2)
        >>> for i in range(5):
        ...     store(float(i))
        >>> store.results
        [0.0, 2.0, 4.0]
        """
        self.results = [] if results is None else results
        self.step = int(step)
        self.iter = 0

    def __call__(self, x):
        """Store a copy of ``x`` if the iteration is due."""
        if self.iter % self.step == 0:
            self.results.append(copy.copy(x))
        self.iter += 1

    def reset(self):
        """Start over with an empty list of results."""
        self.results = []
        self.iter = 0

    def __iter__(self):
        return iter(self.results)

    def __getitem__(self, index):
        return self.results[index]

    def __len__(self):
        return len(self.results)

    def __repr__(self):
        """Return ``repr(self)``."""
        optargs = [('results', self.results, []),
                   ('step', self.step, 1)]
        return '{}({})'.format(self.__class__.__name__,
                               signature_string([], optargs))


class CallbackPrintIteration(Callback):

    """Print the number of the current iteration."""

    def __init__(self, fmt='iter = {}', step=1, **kwargs):
        """Initialize a new instance.

        Parameters
        ----------
        fmt : str, optional
            Format string, printed as ``fmt.format(iteration)``.
        step : positive int, optional
            Print every ``step``-th iteration, starting with the first.

        Other Parameters
        ----------------
        kwargs :
            Passed to ``print``, e.g., ``file``.

        Examples
        --------
        >>> callback = CallbackPrintIteration(fmt='McSleep iteration {}',
        ...                                   step=3)
        >>> for _ in range(4):
        ...     callback(None)
        McSleep iteration 0
        McSleep iteration 3
        """
        self.fmt = str(fmt)
        self.step = int(step)
        self.iter = 0
        self.kwargs = kwargs

    def __call__(self, x):
        if self.iter % self.step == 0:
            print(self.fmt.format(self.iter), **self.kwargs)
        self.iter += 1

    def reset(self):
        self.iter = 0

    def __repr__(self):
        """Return ``repr(self)``."""
        optargs = [('fmt', self.fmt, 'iter = {}'),
                   ('step', self.step, 1)]
        return '{}({})'.format(self.__class__.__name__,
                               signature_string([], optargs))


class CallbackProgressBar(Callback):

    """Show the progress of a decomposition as ``tqdm`` progress bar.

    Requires the ``tqdm`` package, see the ``progress`` extra of McSleep.
    """

    def __init__(self, niter, **kwargs):
        """Initialize a new instance.

        Parameters
        ----------
        niter : positive int
            Number of iterations of the decomposition, e.g.,
            ``param.niter``.

        Other Parameters
        ----------------
        kwargs :
            Passed to ``tqdm.tqdm``, e.g., ``desc`` or ``file``.
        """
        self.niter = int(niter)
        self.kwargs = kwargs
        self.reset()

    def __call__(self, x):
        self.pbar.update(1)
        if self.pbar.n >= self.niter:
            self.pbar.close()

    def reset(self):
        """Start a new progress bar."""
        import tqdm
        self.pbar = tqdm.tqdm(total=self.niter, **self.kwargs)

    def __repr__(self):
        """Return ``repr(self)``."""
        return '{}({})'.format(self.__class__.__name__, self.niter)


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
