from setuptools import setup, find_packages

setup(
    name="evaluation-records-api",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "sqlalchemy>=1.4",
        "pydantic[email]>=2",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    include_package_data=True,
    python_requires=">=3.9",
)
