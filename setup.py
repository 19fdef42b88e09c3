#!/usr/bin/env python
from setuptools import find_packages, setup

setup(
    name="weakid",
    version="1.0.0",
    description="Thread-safe registry of unique integer ids for objects, keyed by identity",
    packages=find_packages(include=["weakid", "weakid.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=5.4.1",
    ],
    extras_require={
        "tests": [
            "pytest>=7",
        ],
    },
    entry_points={
        "console_scripts": [
            "weakidtool = weakid.commands.main:main",
        ],
    },
)
