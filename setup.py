"""Setup configuration for stream-ingestion package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = (
    readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""
)

setup(
    name="stream-ingestion",
    version="0.1.0",
    description="Backpressure-aware streaming ingestion from pull-based sources into pluggable sinks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "scripts", "scripts.*"]),
    py_modules=["stream_ingest"],
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.26.0",
        "opentelemetry-api>=1.20.0",  # Optional spans, no-op without an SDK
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "tenacity>=8.0.0",  # For S3 retry logic
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "moto[s3]>=5.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=0.990",
        ],
    },
    entry_points={
        "console_scripts": [
            "stream-ingest=stream_ingest:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    keywords="data-engineering streaming ingestion backpressure s3 multipart",
)
