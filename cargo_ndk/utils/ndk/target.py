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
Android ABIs supported by cargo-ndk.

A target may be spelled either the Android way (``arm64-v8a``, used for
jniLibs directory names) or the Rust way (``aarch64-linux-android``).
"""

import enum
from typing import List

from cargo_ndk.utils.ndk.errors import UnsupportedTargetError
from cargo_ndk.utils.ndk.paths import tool_triple


class Target(enum.Enum):
    ARMEABI_V7A = "armeabi-v7a"
    ARM64_V8A = "arm64-v8a"
    X86 = "x86"
    X86_64 = "x86_64"

    @classmethod
    def parse(cls, value: str) -> "Target":
        """
        Parse an ABI-style or triple-style name.

        Matching is exact and case-sensitive, anything else raises
        UnsupportedTargetError.
        """
        target = _BY_NAME.get(value)
        if target is None:
            raise UnsupportedTargetError(value)
        return target

    @property
    def display(self) -> str:
        return self.value

    @property
    def triple(self) -> str:
        return _TRIPLES[self]

    @property
    def tool_triple(self) -> str:
        return tool_triple(self.triple)

    def __str__(self) -> str:
        return self.value


_TRIPLES = {
    Target.ARMEABI_V7A: "armv7-linux-androideabi",
    Target.ARM64_V8A: "aarch64-linux-android",
    Target.X86: "i686-linux-android",
    Target.X86_64: "x86_64-linux-android",
}

_BY_NAME = {}
for _target, _triple in _TRIPLES.items():
    _BY_NAME[_target.value] = _target
    _BY_NAME[_triple] = _target

DEFAULT_TARGETS = [Target.ARMEABI_V7A, Target.ARM64_V8A]


def parse_target_list(value: str) -> List[Target]:
    """Parse a comma separated list such as ``arm64-v8a,x86_64``."""
    return [Target.parse(item.strip()) for item in value.split(",") if item.strip()]
