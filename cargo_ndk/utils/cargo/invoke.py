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
Cargo command line construction and launch.

Everything cargo-ndk adds (``--target``, ``--manifest-path``, ...) goes
before the first ``--`` of the user's arguments, so whatever follows it is
delivered untouched to the consumer behind cargo (rustc, the test harness).
"""

import os
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from cargo_ndk.utils.cmd.cmd_util import exec_command_inherit, exec_command_lines

PASSTHROUGH_SEPARATOR = "--"


def get_cargo_bin(environ: Optional[Mapping[str, str]] = None) -> str:
    """``$CARGO`` when cargo launched us, plain ``cargo`` otherwise."""
    if environ is None:
        environ = os.environ
    return environ.get("CARGO") or "cargo"


def insertion_position(cargo_args: Sequence[str]) -> int:
    for index, arg in enumerate(cargo_args):
        if arg.strip() == PASSTHROUGH_SEPARATOR:
            return index
    return len(cargo_args)


def is_release(cargo_args: Sequence[str]) -> bool:
    """True when ``-r``/``--release`` appears before the ``--`` separator."""
    own_args = cargo_args[:insertion_position(cargo_args)]
    return "--release" in own_args or "-r" in own_args


def needs_manifest_path(manifest_path, working_dir) -> bool:
    if manifest_path is None:
        return False
    manifest_dir = Path(os.path.abspath(manifest_path)).parent
    return os.path.normcase(str(manifest_dir)) != os.path.normcase(os.path.abspath(working_dir))


def build_cargo_args(
    cargo_args: Sequence[str],
    triple: str,
    manifest_path=None,
    working_dir=None,
    extra_args: Sequence[str] = (),
) -> List[str]:
    """
    Insert the cargo-ndk arguments into the user's cargo arguments.

    Example:
        ["build", "--release", "--", "--", "extra"] becomes
        ["build", "--release", "--target", "<triple>", "--", "--", "extra"]
    """
    position = insertion_position(cargo_args)
    injected = ["--target", triple]
    if working_dir is not None and needs_manifest_path(manifest_path, working_dir):
        injected += ["--manifest-path", os.fspath(manifest_path)]
    injected += list(extra_args)
    return list(cargo_args[:position]) + injected + list(cargo_args[position:])


def invoke(
    build_tool_args: Sequence[str],
    triple: str,
    env: Mapping[str, str],
    manifest_path,
    working_dir,
    cargo_bin: Optional[str] = None,
    extra_args: Sequence[str] = (),
    on_stdout_line: Optional[Callable[[str], None]] = None,
) -> int:
    """
    Run cargo for one target and return its exit code verbatim.

    ``env`` is applied on top of the inherited environment. When
    ``on_stdout_line`` is given, cargo's stdout is piped through it line by
    line (used to collect ``--message-format=json`` messages).
    """
    command = [cargo_bin or get_cargo_bin()] + build_cargo_args(
        build_tool_args, triple, manifest_path, working_dir, extra_args
    )
    if on_stdout_line is None:
        return exec_command_inherit(command, env=env, cwd=working_dir)
    return exec_command_lines(command, on_stdout_line, env=env, cwd=working_dir)
