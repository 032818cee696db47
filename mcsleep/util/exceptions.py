# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""McSleep specific exceptions."""

__all__ = ('InvalidParameterError', 'BlockGeometryError',
           'FrameIdentityError')


class InvalidParameterError(ValueError):
    """Exception for violated parameter preconditions.

    Raised when a field of the parameter record has an invalid value, is
    missing or is not recognized. The offending field name and the reason
    are available as ``field`` and ``reason`` attributes.
    """

    def __init__(self, field, reason):
        self.field = str(field)
        self.reason = str(reason)
        super().__init__('`{}` {}'.format(self.field, self.reason))

    def __reduce__(self):
        return (self.__class__, (self.field, self.reason))


class BlockGeometryError(ValueError):
    """Exception for signals incompatible with a block geometry.

    Raised when a signal does not have the shape expected by the block
    transform, e.g. when its length cannot be tiled by blocks of length
    ``K`` with overlap ``O``, or when a transform pair returns arrays of
    unexpected shape.
    """


class FrameIdentityError(ValueError):
    """Exception for transform pairs that are not Parseval frames.

    Raised when ``HT(H(y)) == y`` does not hold, which invalidates the
    closed-form least-squares step of the McSleep iteration.
    """
