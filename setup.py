from setuptools import setup, find_packages

setup(
    name="stock_analyzer",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        'pandas',
        'numpy',
        'matplotlib',
        'pydantic>=2',
        'yfinance'
    ],
    extras_require={
        'test': ['pytest']
    }
)
