from setuptools import setup, find_packages


setup(
    name="laudo",
    version="0.1",
    packages=find_packages(include=["laudo", "laudo.*"]),
    description="Tamper-evident, year-partitioned zip packaging of process hash logs with root-hash lookup.",
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.110",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "httpx>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "laudo=laudo.cli:main",
        ]
    },
)
