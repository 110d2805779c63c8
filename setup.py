#!/usr/bin/env python3

import pathlib

from setuptools import find_packages, setup

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text()

# Version
__version__ = "0.1.0"

setup(
    name="assocflow",
    version=__version__,
    author="AssocFlow Development Team",
    description="Permutation-based association analysis of genomic region label sets with normalized z-scores",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["assocflow", "assocflow.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        # Core scientific computing
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.9.0",
        # Configuration and utilities
        "pyyaml>=6.0",
        "tqdm>=4.60.0",
        "click>=8.0.0",
        "colorlog>=6.6.0",
        # Parallel processing
        "joblib>=1.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "dev": [
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8>=5.0.0",
            "mypy>=0.991",
            "pre-commit>=2.20.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "assocflow=assocflow.cli:main",
        ],
    },
    zip_safe=False,
    keywords=[
        "permutation-test",
        "z-score",
        "normalized-z-score",
        "genomic-regions",
        "association",
        "bioinformatics",
    ],
)
