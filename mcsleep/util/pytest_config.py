# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Test configuration file."""

import numpy as np

import mcsleep
from mcsleep.util.testutils import simple_fixture

try:
    import pytest
    from pytest import fixture
except ImportError:
    pytest = None

    # Identity fixture
    def fixture(*arg, **kw):
        if arg and callable(arg[0]):
            return arg[0]
        return fixture


# --- Add numpy and McSleep to all doctests ---


@fixture(autouse=True)
def _add_doctest_np_mcsleep(doctest_namespace):
    doctest_namespace['np'] = np
    doctest_namespace['mcsleep'] = mcsleep


# --- Command-line options --- #


def pytest_addoption(parser):
    suite_help = (
        'enable an opt-in test suite NAME. '
        'Available suites: largescale'
    )
    parser.addoption(
        '-S', '--suite', nargs='*', metavar='NAME', type=str, help=suite_help
    )


def pytest_configure(config):
    # Register an additional marker
    config.addinivalue_line(
        'markers', 'suite(name): mark test to belong to an opt-in suite'
    )


def pytest_runtest_setup(item):
    suites = [mark.args[0] for mark in item.iter_markers(name='suite')]
    if suites:
        enabled = item.config.getoption('-S') or []
        if not any(val in suites for val in enabled):
            pytest.skip('test not in suites {!r}'.format(suites))


# --- Reusable fixtures --- #

# NOTE: All global fixtures are prefixed with `mcsleep_` to make them
# non-conflicting with other packages' fixture names.

mcsleep_n_jobs = simple_fixture(name='n_jobs', params=[1, 2])

mcsleep_block_geometry = simple_fixture(
    name='geometry', params=[(8, 4), (8, 0), (6, 4), (10, 5)])
