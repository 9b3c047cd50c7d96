from setuptools import (
    find_packages,
    setup,
)

setup(
    name="c2hsc",
    version="0.8.0",
    description="Create a .hsc Bindings-DSL file from a C API header file",
    python_requires=">=3.11",
    packages=find_packages(exclude=["test", "test.*"]),
    install_requires=[
        "click",
        # 3.x replaced the PLY-based parser and dropped pycparser.plyparser
        "pycparser>=2.21,<3",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "c2hsc=c2hsc:cli",
        ],
    },
)
