"""Setup script for the roimask package."""

from setuptools import setup, find_packages

setup(
    name="roimask",
    version="0.1.0",
    description="Run-length encoded 3D region-of-interest masks for CT volumes",
    author="Kuntal Kokate",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
        "nibabel>=5.0",
        "pydicom>=2.3",
        "tqdm>=4.65",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
