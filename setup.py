#!/usr/bin/env python3
"""
hello-bigtable Setup Script
===========================
Allows installation of the hello-bigtable package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="hello-bigtable",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "google-cloud-bigtable>=2.23.0",
        "google-api-core",
        "google-auth",
        "opentelemetry-api",
        "opentelemetry-sdk",
        "opentelemetry-exporter-gcp-monitoring",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "hello-bigtable=hello_bigtable.main:main",
        ],
    },
)
