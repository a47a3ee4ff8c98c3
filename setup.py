"""Setup configuration for the GigglesD Discord bot."""

from setuptools import setup, find_packages

setup(
    name="gigglesd",
    version="0.1.0",
    description="A Discord bot for member onboarding and link-edit moderation",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.5",
        "aiosqlite>=0.19",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "gigglesd=gigglesd.main:main",
        ],
    },
)
