from setuptools import setup, find_packages

setup(
    name="stream-monitor",
    version="1.0.0",
    packages=find_packages(include=["stream_monitor", "stream_monitor.*"]),
    install_requires=[
        "sqlalchemy>=2.0",
        "redis>=5.0.1",
        "fastapi",
        "uvicorn",
        "aiohttp<3.14",  # aioresponses 0.7.x is incompatible with aiohttp 3.14
        "pydantic>=2.0",
        "pydantic-settings",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-cov",
            "pytest-mock",
            "yarl",
            "aioresponses",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "stream-monitor=stream_monitor.main:main",
        ],
    },
    python_requires=">=3.10",
)
