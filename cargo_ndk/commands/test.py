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
import os
import sys
from pathlib import Path
from typing import List, Optional

from cargo_ndk import __version__
from cargo_ndk.build_scripts.build_utils import (
    derive_adb_path,
    detect_ndk,
    env_flag,
    get_ndk_host_tag,
    resolve_platform,
    resolve_targets,
)
from cargo_ndk.utils.adb.device import AdbDevice, run_on_device
from cargo_ndk.utils.cargo.config import load_ndk_config
from cargo_ndk.utils.cargo.invoke import get_cargo_bin, invoke, is_release
from cargo_ndk.utils.cargo.metadata import Artifact, parse_message
from cargo_ndk.utils.cmd.cmd_util import exit_status
from cargo_ndk.utils.context.command import CliCommand
from cargo_ndk.utils.context.console import Verbosity
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.ndk.env import build_env
from cargo_ndk.utils.ndk.errors import NdkError
from cargo_ndk.utils.ndk.version import needs_libgcc_workaround

TEST_BUILD_ARGS = ["test", "--no-run", "--message-format", "json"]


def relative_to_package(path: str, manifest_path: Optional[str]) -> str:
    if manifest_path:
        package_dir = os.path.dirname(manifest_path)
        if os.path.commonpath([package_dir, path]) == package_dir:
            return os.path.relpath(path, package_dir)
    return path


def split_test_args(forwarded: List[str]):
    """Split at the first '--': (cargo args, test binary args)."""
    if "--" in forwarded:
        index = forwarded.index("--")
        return forwarded[:index], forwarded[index + 1:]
    return list(forwarded), []


class Test(CliCommand):
    VALUE_FLAGS = ["-t", "--target", "--platform", "--manifest-path", "--adb-serial"]
    SWITCH_FLAGS = [
        "--link-builtins",
        "--no-libgcc-workaround",
        "-h",
        "--help",
        "-V",
        "--version",
    ]

    def description(self) -> str:
        return """Build the test binaries of a crate and run them on a connected device.

Tests are built with `cargo test --no-run`, pushed to /data/local/tmp with
adb, executed and removed again. Arguments after '--' are passed to every
test binary. Doctests cannot run on a device.

EXAMPLES:
    cargo ndk-test -t arm64-v8a
    cargo ndk-test -t x86_64 --adb-serial emulator-5554 -- --nocapture
    cargo ndk-test -t arm64-v8a -p mycrate --release

ENVIRONMENT VARIABLES:
    CARGO_NDK_TARGET        Default target
    CARGO_NDK_PLATFORM      Default API level
    CARGO_NDK_ADB_SERIAL    Device to use when several are connected
        """

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="cargo ndk-test",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "-t", "--target",
            default=None,
            help="triple for the target, Rust or Android name (i.e. arm64-v8a)",
        )
        parser.add_argument(
            "--platform",
            type=int,
            default=None,
            help="platform, also known as API level (default: 21)",
        )
        parser.add_argument(
            "--manifest-path",
            default=None,
            metavar="PATH",
            help="path to Cargo.toml",
        )
        parser.add_argument(
            "--adb-serial",
            default=None,
            metavar="SERIAL",
            help="serial number of the device to test on (see `adb devices`); "
            "the first available device is used when not set",
        )
        parser.add_argument(
            "--link-builtins",
            action="store_true",
            help="link the clang builtins library",
        )
        parser.add_argument(
            "--no-libgcc-workaround",
            action="store_true",
            help="do not redirect libgcc to libunwind",
        )
        parser.add_argument(
            "-V", "--version",
            action="version",
            version=f"cargo-ndk {__version__}",
        )
        return parser

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        if argv is None:
            argv = sys.argv[1:]
        own_args, forwarded = self.split_args(argv)
        args = self.build_parser().parse_args(own_args, namespace=CliNameSpace())
        args.cargo_args, args.test_args = split_test_args(forwarded)
        args.verbosity = Verbosity.from_args(argv)
        return args

    def build_tests(self, context: CliContext, args: CliNameSpace, target, env, cargo_bin) -> List[Artifact]:
        console = context.console
        console.verbose("Building", f"test binary for {target} ({target.triple})")

        executables = []

        def on_line(line: str):
            artifact = parse_message(line)
            if artifact is not None and artifact.executable:
                executables.append(artifact)

        code = invoke(
            TEST_BUILD_ARGS + args.cargo_args,
            target.triple,
            env,
            args.manifest_path,
            context.working_dir,
            cargo_bin=cargo_bin,
            on_stdout_line=on_line,
        )
        if code != 0:
            console.error("Failed to build test binary")
            sys.exit(exit_status(code))
        if not executables:
            console.error("No test binary found in the build output")
            sys.exit(1)
        return executables

    def exec(self, context: CliContext, args: CliNameSpace):
        console = context.console
        console.verbosity = args.verbosity
        environ = context.environ
        working_dir = Path(context.working_dir)

        try:
            adb_path = derive_adb_path(environ, console)
            console.verbose("Found", f"adb at {adb_path}")
            ndk_root, ndk_version = detect_ndk(environ, console)

            manifest_path = Path(args.manifest_path or working_dir / "Cargo.toml")
            config = load_ndk_config(manifest_path, is_release(args.cargo_args))
            target = resolve_targets([args.target] if args.target else None, environ, config)[0]
            target_dir = environ.get("CARGO_TARGET_DIR") or manifest_path.parent / "target"

            env = build_env(
                target.triple,
                ndk_root,
                get_ndk_host_tag(),
                resolve_platform(args.platform, environ, config),
                link_compat_shim=not args.no_libgcc_workaround and needs_libgcc_workaround(ndk_version),
                generate_bindings=False,
                target_dir=target_dir,
                environ=environ,
                link_builtins=args.link_builtins or env_flag(environ, "CARGO_NDK_LINK_BUILTINS"),
            )
            tests = self.build_tests(context, args, target, env, get_cargo_bin(environ))

            device = AdbDevice(adb_path, args.adb_serial or environ.get("CARGO_NDK_ADB_SERIAL"))
            failed = False
            for test in tests:
                name = relative_to_package(test.src_path or test.executable, test.manifest_path)
                rel_path = relative_to_package(test.executable, test.manifest_path)
                console.status("Running", f"unittests {name} ({rel_path})")
                code = run_on_device(device, test.executable, args.test_args, console, label="test binary")
                if code != 0:
                    failed = True
        except NdkError as e:
            self.exit_with_error(console, e)

        console.note("No doctests can currently be run on Android devices. Please run them on your host machine.")
        if failed:
            sys.exit(1)
