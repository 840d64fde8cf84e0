"""
Setup script for the navbot package.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read version from navbot/__init__.py
version = "0.1.0"
init_file = Path(__file__).parent / "navbot" / "__init__.py"
if init_file.exists():
    for line in init_file.read_text().splitlines():
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

setup(
    name="navbot",
    version=version,
    description="Screen navigation engine and admin broadcast bot for Telegram",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["navbot", "navbot.*"]),
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "navbot=navbot.telegram_bot.__main__:main",
        ],
    },
    install_requires=[
        "python-telegram-bot>=20.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Chat",
    ],
    keywords="telegram bot navigation broadcast",
)
