# setup.py
from setuptools import setup, find_packages

setup(
    name="dmap_db",
    version="0.1.0",
    description="DMAP photo annotation store and project export",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "dist",
            "build",
        )
    ),
    install_requires=[
        "pydantic>=2",
        "fastapi",
    ],
    extras_require={
        "server": ["uvicorn"],
        "test": ["pytest", "httpx"],
    },
    python_requires=">=3.10",
)
