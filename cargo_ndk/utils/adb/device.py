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
import posixpath
from typing import List, Optional, Sequence

from cargo_ndk.utils.cmd.cmd_util import exec_command, exec_command_inherit
from cargo_ndk.utils.context.console import Console, Verbosity

DEVICE_TMP_DIR = "/data/local/tmp"


class AdbDevice:
    """A device addressed through ``adb [-s <serial>]``."""

    def __init__(self, adb_path, serial: Optional[str] = None):
        self.adb_path = os.fspath(adb_path)
        self.serial = serial

    def _command(self, *args) -> List[str]:
        command = [self.adb_path]
        if self.serial:
            command += ["-s", self.serial]
        return command + list(args)

    def push(self, local_path, device_path: str):
        """Returns (exit_code, stderr)."""
        code, _, stderr = exec_command(self._command("push", os.fspath(local_path), device_path))
        return code, stderr

    def chmod(self, device_path: str, mode: str = "755") -> int:
        return exec_command_inherit(self._command("shell", "chmod", mode, device_path))

    def run(self, device_path: str, args: Sequence[str] = ()) -> int:
        return exec_command_inherit(self._command("shell", device_path, *args))

    def remove(self, device_path: str) -> int:
        return exec_command_inherit(self._command("shell", "rm", device_path))


def device_path_for(executable) -> str:
    return posixpath.join(DEVICE_TMP_DIR, os.path.basename(os.fspath(executable)))


def run_on_device(
    device: AdbDevice,
    executable,
    args: Sequence[str],
    console: Console,
    label: str = "binary",
) -> int:
    """
    Push ``executable`` to the device, run it and remove it again.

    Returns the on-device exit code; push and chmod failures return the adb
    exit code after printing what went wrong.
    """
    device_path = device_path_for(executable)

    code, stderr = device.push(executable, device_path)
    if code != 0:
        console.error(f"Failed to push {label} to device")
        if stderr.strip():
            console.error(stderr.strip())
        console.note("If multiple devices, use --adb-serial to specify one.")
        console.note("Run `adb devices` to see connected devices.")
        return code or 1
    console.verbose("Pushing", f"{label} to device ({device_path})")

    code = device.chmod(device_path)
    if code != 0:
        console.error(f"Failed to make {label} executable")
        return code or 1

    run_args = list(args)
    if console.verbosity == Verbosity.QUIET:
        run_args.insert(0, "-q")
    code = device.run(device_path, run_args)

    # leftover binaries in /data/local/tmp are harmless, ignore failures
    device.remove(device_path)
    return code
