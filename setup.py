#!/usr/bin/env python

import os
from setuptools import setup

def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()

setup(
    name='sqlbridge',
    version='0.1.0',
    description='Serve parameterized SQL against a SQLite database over a stdin/stdout message protocol',
    long_description=read("README"),
    packages=['sqlbridge'],
    install_requires=[
        "msgpack>=1.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sqlbridge=sqlbridge.process:main",
        ],
    },
    python_requires=">=3.8",
)
