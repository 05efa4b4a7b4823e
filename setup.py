from setuptools import setup, find_packages

setup(
    name="clientcheck",
    version="1.0.0",
    description="Run a client's API test list from a YAML or JSON configuration file",
    author="clientcheck contributors",
    packages=find_packages(include=["clientcheck", "clientcheck.*"]),
    install_requires=[
        "requests",
        "pyyaml",
        "colorama",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
        "examples": [
            "flask",
        ],
    },
    entry_points={
        "console_scripts": [
            "clientcheck=clientcheck.cli:main",
        ],
    },
    python_requires=">=3.8",
)
