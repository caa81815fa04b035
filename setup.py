"""Setup script for the facedome face tracker package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="facedome",
    version="0.1.0",
    description="Real-time face tracking with greedy association and Kalman smoothing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="FaceDome Team",
    packages=find_packages(exclude=["tests*", "docs*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.26.0",
        "pyyaml>=6.0.0",
        "pandas>=2.2.0",
        "opencv-python>=4.9.0",
        "insightface>=0.7.3",
        "onnxruntime>=1.16.3",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "black",
            "flake8",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "facedome-track=facedome.run_tracker:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
    ],
)
