from setuptools import setup, find_packages

setup(
    name="wfc-toolset",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),  # design_api and its services
    include_package_data=True,
    package_data={"design_api": ["constants.json"]},
    install_requires=[
        "fastapi>=0.95.0",
        "uvicorn[standard]>=0.22.0",
        "pydantic>=1.10",
        "python-dotenv>=1.1.1",
        "numpy>=1.23",
        "rtree>=1.0",
        "trimesh>=4.0.0",
    ],
    extras_require={
        "dev": ["pytest", "httpx"],  # for testing
    },
)
