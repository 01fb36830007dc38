from setuptools import setup, find_packages

setup(
    name="aurfetch",
    version="0.1.0",
    description="Fetches the AUR dependencies of PKGBUILD recipes.",
    author="aurfetch developers",
    license="GPL-2.0-or-later",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "rich>=13.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "aurfetch=aurfetch.modules.cli:main",
        ],
    },
)
