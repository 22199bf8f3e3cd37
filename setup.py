from setuptools import setup, find_packages

setup(
    name="rnamotif",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    include_package_data=True,
    install_requires=[
        "ViennaRNA",
        "networkx",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rnamotif=rnamotif.cli:main",
        ],
    },
)
