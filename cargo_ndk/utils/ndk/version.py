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

"""
NDK version detection.

Every NDK ships a ``source.properties`` file at its root, e.g.:

    Pkg.Desc = Android NDK
    Pkg.Revision = 25.1.8937393

Only NDK r23 and later are supported: r23 moved binutils out of the
toolchain (``llvm-ar`` replaces ``<triple>-ar``) and dropped libgcc, and the
path resolver only knows that layout.
"""

import os
import re
from dataclasses import dataclass

from cargo_ndk.utils.ndk.errors import (
    MalformedVersionError,
    MissingRevisionError,
    NdkVersionError,
    UnsupportedNdkVersionError,
)

MIN_SUPPORTED_MAJOR = 23

SOURCE_PROPERTIES = "source.properties"

REVISION_KEY = "Pkg.Revision"

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+([0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True)
class NdkVersion:
    major: int
    minor: int
    patch: int
    pre: str = ""
    build: str = ""

    @classmethod
    def parse(cls, raw: str) -> "NdkVersion":
        match = _SEMVER_RE.match(raw)
        if not match:
            raise MalformedVersionError(raw)
        major, minor, patch, pre, build = match.groups()
        return cls(int(major), int(minor), int(patch), pre or "", build or "")

    @property
    def sort_key(self):
        # a pre-release sorts before the release it precedes
        return (self.major, self.minor, self.patch, self.pre == "", self.pre)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += f"-{self.pre}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_version(ndk_root) -> NdkVersion:
    """
    Read the NDK version from ``<ndk_root>/source.properties``.

    Args:
        ndk_root: NDK installation directory

    Returns:
        NdkVersion: the parsed ``Pkg.Revision`` value

    Raises:
        MissingRevisionError: the file or the ``Pkg.Revision`` line is missing
        MalformedVersionError: the value is not a semantic version
        NdkVersionError: the file could not be read
    """
    path = os.path.join(ndk_root, SOURCE_PROPERTIES)
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        raise MissingRevisionError(path) from None
    except (OSError, UnicodeDecodeError) as e:
        raise NdkVersionError(f"Could not read {path}: {e}") from e

    for line in lines:
        if not line.startswith(REVISION_KEY):
            continue
        key, sep, value = line.partition("=")
        if not sep or key.strip() != REVISION_KEY:
            continue
        return NdkVersion.parse(value.strip())

    raise MissingRevisionError(path)


def ensure_supported(version: NdkVersion) -> NdkVersion:
    """Hard stop for NDKs whose on-disk layout predates r23."""
    if version.major < MIN_SUPPORTED_MAJOR:
        raise UnsupportedNdkVersionError(version, MIN_SUPPORTED_MAJOR)
    return version


def needs_libgcc_workaround(version: NdkVersion) -> bool:
    # r23 stopped shipping libgcc, which rustup's prebuilt std still links
    return version.major >= 23
