"""
Setup script for safelife-store.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="safelife-store",
    version="1.0.0",
    packages=find_packages(include=["safelife", "safelife.*"]),
    python_requires=">=3.11",
    install_requires=[
        "google-cloud-firestore>=2.11",
        "google-auth>=2.0",
        "pymongo>=4.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
