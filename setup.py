# Copyright 2017-2026 The McSleep contributors
#
# This file is part of McSleep.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Setup script for McSleep.

Installation command::

    pip install [--user] [-e] .
"""

from setuptools import setup, find_packages
import os


root = os.path.dirname(__file__)

with open(os.path.join(root, 'requirements.txt')) as f:
    requires = [line.strip() for line in f if line.strip()]

with open(os.path.join(root, 'test_requirements.txt')) as f:
    test_requires = [line.strip() for line in f if line.strip()]

with open(os.path.join(root, 'mcsleep', 'VERSION')) as f:
    version = f.read().strip()


long_description = """
McSleep is a Python library for the separation of multichannel time series,
in particular sleep EEG, into a transient and an oscillatory component.

The transient component is modelled as sparse and piecewise constant with a
low-pass trend, the oscillatory component as a signal whose overlapping
short-time blocks are collectively low-rank across channels. The resulting
convex problem is solved with an ADMM (variable splitting) iteration that
alternates a fused-lasso step, a block singular value thresholding step and
a closed-form least-squares step.

Features
========

- The ADMM solver with pluggable proximal operators and per-iterate callbacks.
- A Parseval block transform pair for overlapping short-time blocks.
- Proximal operators for the L1 norm, higher order total variation and the
  nuclear norm of stacked blocks.
- Epoch-wise decomposition of long recordings and sleep spindle detection on
  the oscillatory component.
- Synthetic test signals with known transient and low-rank parts.
"""

setup(
    name='mcsleep',

    version=version,

    description='Multichannel transient/oscillation separation by sparse '
                'low-rank optimization',
    long_description=long_description,

    author='McSleep contributors',

    license='MPL-2.0',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 4 - Beta',

        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Scientific/Engineering :: Medical Science Apps.',

        'License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)',

        'Programming Language :: Python :: 3',

        'Operating System :: OS Independent'
    ],

    keywords='research signal-processing eeg sleep admm low-rank sparse',

    packages=find_packages(),
    package_dir={'mcsleep': 'mcsleep'},
    package_data={'mcsleep': ['VERSION']},
    include_package_data=True,

    python_requires='>=3.7',
    install_requires=requires,
    extras_require={
        'testing': test_requires,
        'progress': 'tqdm',
        'show': 'matplotlib',
    },
)
