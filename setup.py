"""
setup.py for ffbuild

Runtime Requirements:
- Python 3.10+
- A native package manager: Homebrew (macOS), apt (Debian/Ubuntu) or pacman (MSYS2)
- An FFmpeg source checkout (see --source-dir / FFBUILD_SOURCE_DIR)

Parallel Build Support:
- Compiles with all CPU cores by default
- Override with: ffbuild --jobs N
- Or set environment: export FFBUILD_MAX_JOBS=N
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="ffbuild",
    version="1.0.0",
    description="Cross-platform FFmpeg build orchestrator: dependencies, configure flags and build",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["ffbuild", "ffbuild.*"]),
    package_data={
        "ffbuild": [
            "config/*.yaml",
        ]
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "ffbuild=ffbuild.main:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "pyyaml>=6.0",
        "pydantic>=2.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: MacOS",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Multimedia :: Video",
    ],
)
