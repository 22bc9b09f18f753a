from setuptools import find_packages, setup

setup(
    name="rill",
    version="0.1.0",
    description="Lazy clonable enumerations, container bridges and buffered channels",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
)
