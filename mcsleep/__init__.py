# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""McSleep (Multichannel Sparse Low-rank Decomposition).

McSleep is a Python library that separates multichannel signals into a
sparse transient component and an oscillatory component of low rank in
overlapping time blocks, with sleep spindle detection as the main
application.
"""

from os import path

import numpy as np

__all__ = (
    'applications',
    'datasets',
    'solvers',
    'trafos',
    'util',
)

# Set package version
curdir = path.abspath(path.dirname(__file__))

with open(path.join(curdir, 'VERSION')) as version_file:
    __version__ = version_file.read().strip()

# Set printing line width to 71 to allow method docstrings to not extend
# beyond 79 characters (2 times indent of 4)
np.set_printoptions(linewidth=71)

# Subpackages keep their namespaces separate from top-level, only the
# solver entry points are imported into it
from . import util
from . import trafos
from . import solvers
from . import applications
from . import datasets

from .solvers.nonsmooth.mcsleep_admm import mcsleep, mcsleep_decompose
from .solvers.nonsmooth.parameters import McSleepParams

__all__ += ('mcsleep', 'mcsleep_decompose', 'McSleepParams')

# Add `test` function to global namespace so users can run `mcsleep.test()`
from .util import test
