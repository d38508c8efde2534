"""
flagguard setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="flagguard",
    version="1.0.0",
    description="flagguard — single active flag validation for record models",
    packages=find_packages(include=["flagguard", "flagguard.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "flagguard=flagguard.cli:main",
        ],
    },
    install_requires=[
        "sqlalchemy>=2.0",
        "psycopg2-binary>=2.9",
        "pydantic>=2.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
)
