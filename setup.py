"""
Setup script for Browser Sync Coordinator
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="browser-sync-coordinator",
    version="2.2.0",
    author="Distributed Systems Course",
    description="Leader election and shared state for polling browsers over HTTP",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["browser_sync", "browser_sync.*"]),
    entry_points={
        "console_scripts": [
            "browser-sync=browser_sync.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: System :: Distributed Computing",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "aiohttp>=3.9",
        "pydantic>=2.0",
        "click>=8.0",
        "psutil>=5.9",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23",
            "pytest-cov>=4.0.0",
        ],
    },
)
