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

import os
from typing import Mapping, Optional

from cargo_ndk.utils.context.console import Console


# This context data class to save the context of the command
class CliContext:
    def __init__(
        self,
        console: Optional[Console] = None,
        environ: Optional[Mapping[str, str]] = None,
        working_dir: Optional[str] = None,
    ):
        self.console = console or Console()
        # read-only view of the inherited environment, never mutated
        self.environ = environ if environ is not None else os.environ
        self.working_dir = working_dir or os.getcwd()
