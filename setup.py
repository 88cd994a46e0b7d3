from setuptools import find_packages, setup

setup(
    name="racli",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "cryptography",
        "requests",
        "click",
        "base58",
    ],
    extras_require={
        "test": [
            "pytest",
            "fastapi",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "ra=racli.cli:cli",
        ],
    },
)
