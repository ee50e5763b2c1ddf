"""
Inkwell setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="inkwell",
    version="1.0.0",
    description="Inkwell — Versioned document manager core",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "inkwell=inkwell.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "bcrypt>=4.1",
        "pyyaml>=6.0",
        "markdown>=3.5",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
)
