# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Synthetic test signals."""

from .synthetic import *

__all__ = ()
__all__ += synthetic.__all__
