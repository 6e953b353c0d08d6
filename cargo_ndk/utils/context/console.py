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
Status and diagnostic output for cargo-ndk commands.

Progress lines mimic cargo's right-aligned status verbs so that our output
interleaves cleanly with the output of the cargo process we drive:

       Building arm64-v8a (aarch64-linux-android)
        Copying libraries to /path/to/jniLibs

Everything goes to stderr; stdout is kept for data (env exports, JSON,
output of the child process).
"""

import enum
import sys
from typing import Iterable


class Verbosity(enum.IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    VERY_VERBOSE = 3

    @classmethod
    def from_args(cls, args: Iterable[str]) -> "Verbosity":
        """
        Derive verbosity from raw command line tokens.

        Only tokens before the first "--" are considered, the rest belongs to
        the downstream consumer. Tokens are not consumed, so "-v" still reaches
        cargo as well.
        """
        seen = set()
        for arg in args:
            if arg == "--":
                break
            seen.add(arg)
        if "-q" in seen or "--quiet" in seen:
            return cls.QUIET
        if "-vv" in seen:
            return cls.VERY_VERBOSE
        if "-v" in seen or "--verbose" in seen:
            return cls.VERBOSE
        return cls.NORMAL


class Console:
    STATUS_WIDTH = 12

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        self.verbosity = verbosity

    def _write(self, line: str):
        # looked up on every call so redirected/captured stderr is honoured
        print(line, file=sys.stderr, flush=True)

    def status(self, verb: str, message: str):
        if self.verbosity >= Verbosity.NORMAL:
            self._write(f"{verb:>{self.STATUS_WIDTH}} {message}")

    def verbose(self, verb: str, message: str):
        if self.verbosity >= Verbosity.VERBOSE:
            self._write(f"{verb:>{self.STATUS_WIDTH}} {message}")

    def very_verbose(self, verb: str, message: str):
        if self.verbosity >= Verbosity.VERY_VERBOSE:
            self._write(f"{verb:>{self.STATUS_WIDTH}} {message}")

    def error(self, message):
        self._write(f"ERROR: {message}")

    def warn(self, message):
        self._write(f"WARNING: {message}")

    def note(self, message):
        if self.verbosity >= Verbosity.NORMAL:
            self._write(f"NOTE: {message}")
