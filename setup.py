from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="wwnet",
    version="0.1.0",
    author="Ricardo",
    author_email="ricardo.reyes@eawag.ch",
    description="Steady-state mass balance of wastewater treatment process networks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.10',
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "networkx",
        "pint",
        "pint-pandas",
        "dynaconf",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
