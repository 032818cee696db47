# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Routines for the McSleep decomposition and its building blocks."""

from .nonsmooth import *
from .util import *

__all__ = ()

__all__ += nonsmooth.__all__
__all__ += util.__all__
