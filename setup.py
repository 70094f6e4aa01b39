from setuptools import setup, find_packages

setup(
    name="vitalscore",
    version="0.1.0",
    packages=find_packages(include=["vitalscore", "vitalscore.*"]),
    python_requires=">=3.9",
    install_requires=[
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings>=2",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
