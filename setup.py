#!/usr/bin/env python

from setuptools import setup

setup(
    name="drinksync",
    version="0.3.0",
    description="Keep drink image records in DynamoDB in sync with images stored in S3",
    packages=["drinksync", "drinksync.api"],
    include_package_data=True,
    zip_safe=False,
    keywords=["AWS", "S3", "SNS", "DynamoDB", "lambda"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: System :: Archiving :: Mirroring",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "httpx",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "aiobotocore",
    ],
    extras_require={
        'dev': [
            'pytest',
            'anyio',
            'pytest-httpx',
            'mypy',
            'flake8',
        ]
    },
    entry_points={
        'console_scripts': [
            'drinksync = drinksync.__main__:main'
        ]
    },
)
