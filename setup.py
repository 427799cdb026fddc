"""Setup configuration for the Sentinel moderation dashboard."""

from setuptools import setup, find_packages

setup(
    name="sentinel-dashboard",
    version="0.0.1",
    description="A real-time chat moderation dashboard using AI classification",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "openai>=1.40",
        "jsonschema>=4.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "sentinel=sentinel.main:main",
        ],
    },
)
