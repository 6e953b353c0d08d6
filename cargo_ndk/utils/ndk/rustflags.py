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
Extra rustc flags passed to cargo through the environment.

Cargo accepts them in two mutually exclusive forms:
- CARGO_ENCODED_RUSTFLAGS: flags joined with the ASCII unit separator (0x1f)
- RUSTFLAGS: flags joined with spaces

Whichever form the user already uses is extended in place, so nothing the
user configured gets dropped. A fresh value starts in the plain form.
"""

import enum
from typing import Mapping, Optional, Tuple

from cargo_ndk.utils.ndk.errors import RustFlagsConflictError

ENCODED_RUSTFLAGS = "CARGO_ENCODED_RUSTFLAGS"
PLAIN_RUSTFLAGS = "RUSTFLAGS"
UNIT_SEPARATOR = "\x1f"


class RustFlagsKind(enum.Enum):
    EMPTY = "empty"
    ENCODED = "encoded"
    PLAIN = "plain"


class RustFlags:
    def __init__(self, kind: RustFlagsKind = RustFlagsKind.EMPTY, value: str = ""):
        self.kind = kind
        self.value = value

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "RustFlags":
        """
        Read the inherited flags.

        Raises:
            RustFlagsConflictError: both forms are present
        """
        encoded = environ.get(ENCODED_RUSTFLAGS)
        plain = environ.get(PLAIN_RUSTFLAGS)
        if encoded is not None and plain is not None:
            raise RustFlagsConflictError()
        if encoded is not None:
            return cls(RustFlagsKind.ENCODED, encoded)
        if plain is not None:
            return cls(RustFlagsKind.PLAIN, plain)
        return cls()

    @property
    def separator(self) -> str:
        return UNIT_SEPARATOR if self.kind is RustFlagsKind.ENCODED else " "

    def flags(self):
        if not self.value:
            return []
        if self.kind is RustFlagsKind.ENCODED:
            return self.value.split(UNIT_SEPARATOR)
        return self.value.split()

    def append(self, flag: str):
        if self.kind is RustFlagsKind.EMPTY:
            self.kind = RustFlagsKind.PLAIN
            self.value = flag
            return
        if flag in self.flags():
            return
        if self.value:
            self.value += self.separator
        self.value += flag

    def as_env_var(self) -> Optional[Tuple[str, str]]:
        if self.kind is RustFlagsKind.ENCODED:
            return ENCODED_RUSTFLAGS, self.value
        if self.kind is RustFlagsKind.PLAIN:
            return PLAIN_RUSTFLAGS, self.value
        return None

    def __repr__(self) -> str:
        return f"RustFlags({self.kind.value}, {self.value!r})"
