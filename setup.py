from __future__ import annotations

from setuptools import find_namespace_packages, setup

setup(
    name="surface-evolver",
    version="0.1.0",
    description="Volume-preserving surface-tension flow on closed triangle meshes",
    python_requires=">=3.10",
    packages=find_namespace_packages(
        include=[
            "core",
            "geometry",
            "parameters",
            "runtime",
            "runtime.*",
            "surface_evolver",
            "visualization",
        ]
    ),
    py_modules=["main"],
    install_requires=[
        "numpy",
        "pyyaml",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "surface-evolver=main:main",
        ],
    },
)
