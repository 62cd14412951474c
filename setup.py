# setup.py

from setuptools import setup, find_packages

setup(
    name="wiresim",
    version="0.1.0",
    packages=find_packages(include=["wiresim", "wiresim.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib",
        "lmfit",
        "pyyaml",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ]
    },
    entry_points={
        "console_scripts": [
            "run-simwire=wiresim.scripts.run_simwire:main",
        ]
    },
)
