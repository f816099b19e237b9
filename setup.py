#!/usr/bin/env python3
# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Setup script for the crossword assessment generator package.
"""

from setuptools import setup
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="autocross-assessment",
    version="1.0.0",
    author="TrailLensCo",
    description="AI-generated crossword assessments built from course material",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        "ai_client",
        "ai_limiter",
        "assessment_generator",
        "assessment_store",
        "config",
        "crossword_orchestrator",
        "document_extractor",
        "grid",
        "logging_config",
        "models",
        "prompt_loader",
        "validator",
    ],
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "anthropic>=0.75.0",
        "pyyaml>=6.0.2",
        "pdfplumber>=0.11.0",
        "python-docx>=1.1.0",
        "python-pptx>=0.6.23",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "autocross=assessment_generator:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Education :: Testing",
    ],
)
