# setup.py
from setuptools import setup, find_packages

setup(
    name="deal_scout",
    version="0.1.0",
    description="Асинхронный загрузчик сделок и задач amoCRM через CORS-прокси",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"deal_scout": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["deal-scout=deal_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
