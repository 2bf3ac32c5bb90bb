"""
Setup script for skilltree.

Skill Tree is a gamified lesson player: a skill map of lessons with
multiple choice and fill-in-the-blank exercises, a lives/score economy,
and persisted progress with a weak-exercise practice mode.

The 'skilltree' command starts the terminal player; 'uvicorn main:app'
serves the same player over HTTP for a browser front end.
"""

from setuptools import find_packages, setup

setup(
    name="skilltree",
    version="0.1.0",
    description="Gamified skill-tree lesson player with spaced-repetition practice",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["skilltree", "skilltree.*"]),
    py_modules=["config", "main"],
    package_data={"skilltree.content": ["*.json"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.23.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "skilltree=skilltree.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition skill-tree lessons education",
)
