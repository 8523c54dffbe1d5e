from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="asset_tagger",
    version=Path("./asset_tagger/VERSION").read_text().strip(),
    packages=find_packages(include=["asset_tagger", "asset_tagger.*"]),
    package_data={"asset_tagger": ["VERSION"]},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "easydict",
        "matplotlib>=3.6",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": ["asset_tagger=asset_tagger.cli:main"],
    },
)
