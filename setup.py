from setuptools import setup
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="pomdriver",
    version="0.3.0",
    description="Fluent page-object runtime with click confirmation and cursor animation for zendriver",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["pomdriver", "pomdriver.cursor", "pomdriver.keyboard"],
    install_requires=[
        "zendriver",
        "Pillow",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "pytest11": ["pomdriver = pomdriver.pytest_plugin"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Framework :: Pytest",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
