from setuptools import setup, find_packages

setup(
    name="fieri",
    version="0.6.0",
    description="Typed client and command-line interface for the OpenAI API",
    author="fieri contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests",
        "pydantic>=2",
        "structlog",
        "python-dotenv",
        "rich",
        "prompt_toolkit",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "fieri=fieri.main:main",
        ],
    },
    python_requires=">=3.8",
)
