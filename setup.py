#!/usr/bin/python
# -*- coding: utf-8 -*-
"""Memory and disk cache for results of external CLI commands used by SF-TUI."""
__author__ = "bibow"

from setuptools import find_packages, setup

setup(
    name="SFTUI-Cache",
    version="0.1.0",
    author="Idea Bosque",
    author_email="ideabosque@gmail.com",
    description="SF-TUI command result cache",
    long_description=__doc__,
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    zip_safe=False,
    platforms="Linux",
    python_requires=">=3.8",
    install_requires=[
        "orjson",
        "pendulum",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
