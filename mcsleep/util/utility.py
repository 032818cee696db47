# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Utilities for internal use."""

import numpy as np


__all__ = ('is_string', 'signature_string', 'signature_string_parts')


def is_string(obj):
    """Return ``True`` if ``obj`` behaves like a string, ``False`` else."""
    try:
        obj + ''
    except TypeError:
        return False
    else:
        return True


def signature_string(posargs, optargs, sep=', ', mod='!r'):
    """Return a stringified signature from given arguments.

    Parameters
    ----------
    posargs : sequence
        Positional argument values, always included in the returned string.
    optargs : sequence of 3-tuples
        Optional arguments with names and defaults, given in the form::

            [(name1, value1, default1), (name2, value2, default2), ...]

        Only those parameters that are different from the given default
        are included as ``name=value`` keyword pairs.

        **Note:** The comparison is done by using ``if value == default:``,
        which is not valid for, e.g., NumPy arrays.

    sep : string or sequence of strings, optional
        Separator(s) for the argument strings. A given sequence must have
        3 entries ``pos_sep, opt_sep, part_sep``.
    mod : string or callable, optional
        Format modifier applied to all arguments, either a format
        conversion like ``'!r'`` or ``':.3'``, or a callable returning
        the string of an argument.

    Returns
    -------
    signature : string
        Stringification of a signature, typically used in the form::

            '{}({})'.format(self.__class__.__name__, signature)

    Examples
    --------
    >>> posargs = [1, 'hello', None]
    >>> optargs = [('dtype', 'float32', 'float64')]
    >>> signature_string(posargs, optargs)
    "1, 'hello', None, dtype='float32'"

    Empty sequences and optargs values equal to default are omitted:

    >>> signature_string(['hello'], [('size', 1, 1)])
    "'hello'"
    >>> signature_string([], [('size', 2, 1)])
    'size=2'
    >>> signature_string([], [('size', 1, 1)])
    ''
    """
    if is_string(sep):
        pos_sep = opt_sep = part_sep = sep
    else:
        pos_sep, opt_sep, part_sep = sep

    posargs_conv, optargs_conv = signature_string_parts(posargs, optargs, mod)

    parts = []
    if posargs_conv:
        parts.append(pos_sep.join(argstr for argstr in posargs_conv))
    if optargs_conv:
        parts.append(opt_sep.join(optargs_conv))

    return part_sep.join(parts)


def _arg_str(arg, modifier, precision):
    """Stringify a single argument value."""
    if callable(modifier):
        return modifier(arg)
    elif is_string(arg):
        # Preserve single quotes for strings by default
        if modifier in ('', '!r'):
            return "'{}'".format(arg)
        return '{{{}}}'.format(modifier).format(arg)
    elif np.isscalar(arg) and str(arg) in ('inf', 'nan'):
        return "'{}'".format(arg)
    elif (isinstance(arg, (float, np.floating)) and
          int(arg) != arg and
          modifier in ('', '!s', '!r')):
        # Floating point value, use numpy print option 'precision'
        return '{{:.{}}}'.format(precision).format(arg)
    else:
        return '{{{}}}'.format(modifier).format(arg)


def signature_string_parts(posargs, optargs, mod='!r'):
    """Return stringified arguments as tuples.

    See `signature_string` for the meaning of the parameters.

    Returns
    -------
    pos_strings : tuple of str
        The stringified positional arguments.
    opt_strings : tuple of str
        The stringified optional arguments, not including the ones
        equal to their respective defaults.
    """
    precision = np.get_printoptions()['precision']

    posargs_conv = [_arg_str(arg, mod, precision) for arg in posargs]

    optargs_conv = []
    for name, value, default in optargs:
        if value == default:
            continue
        optargs_conv.append(
            '{}={}'.format(name, _arg_str(value, mod, precision)))

    return tuple(posargs_conv), tuple(optargs_conv)


if __name__ == '__main__':
    from mcsleep.util.testutils import run_doctests
    run_doctests()
