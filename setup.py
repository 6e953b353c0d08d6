#
# Copyright 2024 cargo-ndk-py Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

from setuptools import setup, find_packages

ALL_PROGRAM_ENTRIES = [
    "cargo-ndk = cargo_ndk.cli:main",
    "cargo-ndk-env = cargo_ndk.cli:main_env",
    "cargo-ndk-test = cargo_ndk.cli:main_test",
    "cargo-ndk-runner = cargo_ndk.cli:main_runner",
]

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="cargo-ndk-py",
    version="1.0.0",
    description="Build Rust code for Android with the NDK, as a cargo subcommand.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="cargo-ndk-py Project Authors",
    python_requires=">=3.8",
    packages=find_packages(include=["cargo_ndk", "cargo_ndk.*"]),
    include_package_data=True,
    install_requires=[
        'tomli>=2.0.0; python_version < "3.11"',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Topic :: Software Development :: Build Tools",
    ],
    zip_safe=False,
    entry_points={"console_scripts": ALL_PROGRAM_ENTRIES},
)
