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

import argparse
import sys
from typing import List, Optional

from cargo_ndk import __version__
from cargo_ndk.build_scripts.build_utils import derive_adb_path
from cargo_ndk.utils.adb.device import AdbDevice, run_on_device
from cargo_ndk.utils.cmd.cmd_util import exit_status
from cargo_ndk.utils.context.command import CliCommand
from cargo_ndk.utils.context.console import Verbosity
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.ndk.errors import NdkError


class Runner(CliCommand):
    def description(self) -> str:
        return """Run an Android executable on a connected device.

The executable is pushed to /data/local/tmp, run with the given arguments
and removed again. The exit code of the on-device process becomes ours, so
this command can serve as a cargo target runner.

EXAMPLES:
    cargo ndk-runner target/aarch64-linux-android/debug/app --flag
    CARGO_TARGET_AARCH64_LINUX_ANDROID_RUNNER=cargo-ndk-runner cargo run --target aarch64-linux-android
        """

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="cargo ndk-runner",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--adb-serial",
            default=None,
            metavar="SERIAL",
            help="serial number of the device to run on (see `adb devices`); "
            "the first available device is used when not set",
        )
        parser.add_argument(
            "-v",
            dest="verbose",
            action="store_true",
            help="enable verbose output",
        )
        parser.add_argument(
            "-q",
            dest="quiet",
            action="store_true",
            help="enable quiet output (no output except errors)",
        )
        parser.add_argument(
            "-V", "--version",
            action="version",
            version=f"cargo-ndk {__version__}",
        )
        parser.add_argument(
            "executable",
            help="path to the binary to run on the device",
        )
        parser.add_argument(
            "runner_args",
            nargs=argparse.REMAINDER,
            help="arguments passed to the binary",
        )
        return parser

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        if argv is None:
            argv = sys.argv[1:]
        args = self.build_parser().parse_args(argv, namespace=CliNameSpace())
        if args.verbose:
            args.verbosity = Verbosity.VERBOSE
        elif args.quiet:
            args.verbosity = Verbosity.QUIET
        else:
            args.verbosity = Verbosity.NORMAL
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        console = context.console
        console.verbosity = args.verbosity
        environ = context.environ

        try:
            adb_path = derive_adb_path(environ, console)
            device = AdbDevice(adb_path, args.adb_serial or environ.get("CARGO_NDK_ADB_SERIAL"))
            code = run_on_device(device, args.executable, args.runner_args, console)
        except NdkError as e:
            self.exit_with_error(console, e)

        sys.exit(exit_status(code))
