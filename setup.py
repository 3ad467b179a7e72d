#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
#
# AgriDatum harvest client: farmer identity, signing and submission library
#

from agridatum import __version__

# To use this command to install and yet be able to edit the code (here). Great for dev:
#
#   pip install --editable .
#
# with cli dependencies
#
#   pip install --editable '.[cli]'
#
# with test dependencies
#
#   pip install --editable '.[test]'
#
#
from setuptools import setup

# these minimum versions are tested, some earlier values would probably work too.
requirements = [
    'requests>=2.26.0',
    'python-dotenv>=0.19.0',
]

cli_requirements = [
    'click>=8.0.3',
    'pyqrcode>=1.2.1',
    'pypng>=0.0.21',
]

test_requirements = [
    'pytest',
] + cli_requirements

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='agridatum',
    version=__version__,
    packages=[ 'agridatum' ],
    python_requires='>=3.7',
    install_requires=requirements,
    extras_require={
        'cli': cli_requirements,
        'test': test_requirements,
    },
    author='AgriDatum contributors',
    description="Record farm harvests and anchor signed copies via the AgriDatum backend",
    long_description=long_description,
    long_description_content_type="text/markdown",
    entry_points='''
        [console_scripts]
        agridatum=agridatum.cli:main
    ''',
    classifiers=[
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: MacOS :: MacOS X',
    ],
)
