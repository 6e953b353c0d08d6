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
import subprocess
from typing import Callable, List, Mapping, Optional, Tuple

from cargo_ndk.utils.ndk.errors import ToolSpawnError


def child_env(overlay: Optional[Mapping[str, str]] = None) -> dict:
    """Inherited environment with ``overlay`` applied on top."""
    env = dict(os.environ)
    if overlay:
        env.update(overlay)
    return env


def decode_bytes(input: bytes) -> str:
    try:
        return bytes.decode(input, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(input, "UTF-8", errors="replace")


def exit_status(code: int) -> int:
    """
    Exit status to report for a child's return code.

    ``subprocess`` reports death by signal N as ``-N``; shells report it as
    ``128 + N``.
    """
    if code < 0:
        return 128 - code
    return code


def exec_command(command: List[str], env=None, cwd=None) -> Tuple[int, str, str]:
    """
    Run a command to completion, capturing its output.

    Returns:
        tuple: (exit_code, stdout, stderr)
    """
    try:
        compile_popen = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=child_env(env),
            cwd=cwd,
        )
    except OSError as e:
        raise ToolSpawnError(command[0], e) from e
    stdout, stderr = compile_popen.communicate()
    return compile_popen.returncode, decode_bytes(stdout), decode_bytes(stderr)


def exec_command_inherit(command: List[str], env=None, cwd=None) -> int:
    """Run a command attached to our stdio, returning its exit code."""
    try:
        return subprocess.call(command, env=child_env(env), cwd=cwd)
    except OSError as e:
        raise ToolSpawnError(command[0], e) from e


def exec_command_lines(
    command: List[str],
    on_line: Callable[[str], None],
    env=None,
    cwd=None,
) -> int:
    """
    Run a command, handing each stdout line to ``on_line`` as it arrives.

    stderr stays attached to ours so diagnostics show up live. There is no
    timeout: long compiles are expected.
    """
    try:
        compile_popen = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            env=child_env(env),
            cwd=cwd,
        )
    except OSError as e:
        raise ToolSpawnError(command[0], e) from e
    with compile_popen.stdout:
        for raw in compile_popen.stdout:
            on_line(decode_bytes(raw).rstrip("\r\n"))
    return compile_popen.wait()
