# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Solvers for the non-smooth McSleep problem."""

from .mcsleep_admm import *
from .parameters import *
from .proximal_operators import *

__all__ = ()
__all__ += mcsleep_admm.__all__
__all__ += parameters.__all__
__all__ += proximal_operators.__all__
