"""Setup script for pybiquad."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pybiquad",
    version="0.1.0",
    author="Your Name",
    description="Closed-form RBJ cookbook biquad coefficient design for audio EQ",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/pybiquad",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Multimedia :: Sound/Audio :: Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.24.0",
    ],
    extras_require={
        "test": ["pytest", "scipy>=1.10.0"],
        "dev": ["pytest", "scipy>=1.10.0", "black", "flake8"],
    },
)
