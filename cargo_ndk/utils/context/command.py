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

import sys
from typing import List, Optional, Tuple

from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.ndk.errors import NdkError


# Base class of every subcommand: describe, parse, execute
class CliCommand:
    def description(self) -> str:
        raise NotImplementedError

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        raise NotImplementedError

    def exec(self, context: CliContext, args: CliNameSpace):
        raise NotImplementedError

    # Flags of ours that take a value / stand alone. Commands that forward
    # unknown arguments to cargo set these and use split_args().
    VALUE_FLAGS: List[str] = []
    SWITCH_FLAGS: List[str] = []

    def split_args(self, argv: List[str]) -> Tuple[List[str], List[str]]:
        """
        Separate our flags from cargo's, wherever they appear before '--'.

        Returns:
            tuple: (our args, forwarded args), both in original order; the
            forwarded args keep the first '--' and everything after it
        """
        own_args = []
        forwarded = []
        i = 0
        while i < len(argv):
            arg = argv[i]
            if arg == "--":
                forwarded.extend(argv[i:])
                break
            if arg in self.VALUE_FLAGS:
                own_args.append(arg)
                if i + 1 < len(argv):
                    i += 1
                    own_args.append(argv[i])
            elif arg in self.SWITCH_FLAGS:
                own_args.append(arg)
            elif arg.startswith("--") and arg.split("=", 1)[0] in self.VALUE_FLAGS:
                own_args.append(arg)
            else:
                forwarded.append(arg)
            i += 1
        return own_args, forwarded

    def exit_with_error(self, console: Console, error: NdkError):
        console.error(error)
        if error.hint:
            console.note(error.hint)
        sys.exit(error.exit_code)
