#!/usr/bin/env python
"""
Setup script for typecfg
"""
import re
from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

# Read version from the package without importing it
version_file = (this_directory / "src" / "typecfg" / "_version.py").read_text(encoding="utf-8")
version = re.search(r'^__version__ = "([^"]+)"', version_file, re.MULTILINE).group(1)


setup(
    name="typecfg",
    version=version,
    description="Typed configuration files: runtime validators, safe load/edit/save and a click command group",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.6.0",
        "loguru>=0.7.2",
        "pyyaml>=6.0.0",
        "click>=8.1.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.4.0",
            "pytest-cov>=5.0.0",
            "mypy>=1.8.0",
            "ruff>=0.12.0",
            "types-pyyaml>=6.0.12",
        ],
    },
    include_package_data=True,
)
