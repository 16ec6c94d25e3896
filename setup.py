#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Note Layout Engine - Setup Configuration
Enables optional dependency groups for tests and development.
"""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

# Read requirements
requirements_path = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_path.exists():
    requirements = [
        line.strip()
        for line in requirements_path.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.startswith("#")
    ]

test_requirements = [
    "pytest>=7.4.0",
    "httpx>=0.26.0",  # fastapi TestClient
]

setup(
    name="note-layout-engine",
    version="1.0.0",
    description="Structured document layout core rendering to PDF, HTML and DOCX",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Note Layout Team",
    python_requires=">=3.9",
    # core/ and api/ have no __init__.py
    packages=find_namespace_packages(include=["core*", "config*", "api*"]),
    py_modules=["quick_render"],
    install_requires=requirements,
    extras_require={
        "test": test_requirements,

        # Development dependencies
        "dev": test_requirements + [
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "notelayout=quick_render:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Text Processing :: Markup",
        "Topic :: Printing",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="layout pdf docx html rendering pagination typography",
)
