######################################################################
# Copyright (C) 2018 Jtcrf developers
#
# This file is licensed under the MIT License.
######################################################################


import os


meta = {}
base_dir = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(base_dir, 'jtcrf', '_meta.py')) as fp:
    exec(fp.read(), meta)

NAME         = 'jtcrf'
DESCRIPTION  = 'Exact junction tree inference for pairwise conditional random fields'
AUTHOR       = meta['__author__']
VERSION      = meta['__version__']
COPYRIGHT    = meta['__copyright__']


if __name__ == "__main__":

    # Utility function to read the README file.
    def read(fname):
        with open(os.path.join(base_dir, fname)) as fp:
            return fp.read()

    from setuptools import setup, find_packages

    setup(
        install_requires = [
            "numpy",
            "attrs",
        ],
        extras_require   = {
            "test": [
                "pytest",
                "scipy",
            ],
        },
        python_requires  = ">=3.7",
        packages         = find_packages(exclude=["tests", "tests.*"]),
        name             = NAME,
        version          = VERSION,
        author           = AUTHOR,
        description      = DESCRIPTION,
        long_description = read('README.rst'),
        keywords         = [
            'conditional random fields',
            'junction tree',
            'graphical models',
        ],
        classifiers = [
            'Programming Language :: Python :: 3 :: Only',
            'Development Status :: 3 - Alpha',
            'Intended Audience :: Developers',
            'Intended Audience :: Science/Research',
            'License :: OSI Approved :: {0}'.format(meta['__license__']),
            'Operating System :: OS Independent',
            'Topic :: Scientific/Engineering',
            'Topic :: Scientific/Engineering :: Information Analysis'
        ],
    )
