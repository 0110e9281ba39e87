"""
Setup script for ordhook - signed webhook that inscribes files with ord
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

# Read requirements
requirements = []
with open(this_directory / "requirements.txt", "r") as f:
    for line in f:
        line = line.strip()
        if line and not line.startswith("#"):
            requirements.append(line)

# Core dependencies (without development tools)
core_requirements = [
    req for req in requirements
    if not any(dev in req for dev in ["pytest", "black", "mypy", "ruff"])
]

# Development dependencies
dev_requirements = [
    req for req in requirements
    if any(dev in req for dev in ["pytest", "black", "mypy", "ruff"])
]

setup(
    name="ordhook",
    version="0.1.0",
    author="ordhook Team",
    author_email="",
    description="Signed webhook that downloads a file and inscribes it with the ord wallet",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=core_requirements,
    extras_require={
        "dev": dev_requirements,
    },
    entry_points={
        "console_scripts": [
            "ordhook=ordhook.cli:main",
        ],
    },
    zip_safe=False,
)
