from setuptools import setup, find_namespace_packages

setup(
    name="briefgate",
    version="0.1.0",
    packages=find_namespace_packages(include=["briefgate", "briefgate.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.2",
        "httpx>=0.27",
        "redis>=5.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
