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
from cargo_ndk.build_scripts.build_android import AndroidBuild, build_android
from cargo_ndk.build_scripts.build_artifacts import resolve_output_dir
from cargo_ndk.build_scripts.build_utils import (
    detect_ndk,
    env_flag,
    get_ndk_host_tag,
    resolve_platform,
    resolve_targets,
)
from cargo_ndk.utils.cargo.config import load_ndk_config
from cargo_ndk.utils.cargo.invoke import get_cargo_bin, is_release
from cargo_ndk.utils.cargo.metadata import CargoMetadata, load_metadata
from cargo_ndk.utils.cmd.cmd_util import exit_status
from cargo_ndk.utils.context.command import CliCommand
from cargo_ndk.utils.context.console import Verbosity
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.ndk.errors import NdkError


class Build(CliCommand):
    # flags of ours that take a value; everything unknown belongs to cargo
    VALUE_FLAGS = ["-t", "--target", "--platform", "-o", "--output-dir", "--manifest-path"]
    SWITCH_FLAGS = [
        "--link-builtins",
        "--link-libcxx-shared",
        "--bindgen",
        "--no-strip",
        "--no-libgcc-workaround",
        "-h",
        "--help",
        "-V",
        "--version",
    ]

    def description(self) -> str:
        return """Build a Rust library for Android targets using the NDK.

Arguments cargo-ndk does not know are passed to cargo unchanged, in order.
Everything after the first '--' goes to cargo untouched.

EXAMPLES:
    cargo ndk -t arm64-v8a build --release
    cargo ndk -t armeabi-v7a -t arm64-v8a -o ./jniLibs build --release
    cargo ndk -t x86_64 --platform 26 build -- -C opt-level=s

CONFIGURATION (Cargo.toml):
    [package.metadata.ndk]
    platform = 21
    targets = ["armeabi-v7a", "arm64-v8a"]

ENVIRONMENT VARIABLES:
    ANDROID_NDK_HOME        NDK installation (also ANDROID_NDK_ROOT, NDK_HOME, ...)
    CARGO_NDK_TARGET        Default targets (comma-separated)
    CARGO_NDK_PLATFORM      Default API level
    CARGO_NDK_OUTPUT_DIR    Default output directory
    CARGO_NDK_LINK_BUILTINS Link the clang builtins library when set to 1
        """

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="cargo ndk",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "-t", "--target",
            action="append",
            default=None,
            help="triple for the target, Rust or Android name (i.e. arm64-v8a); "
            "repeat or use ',' to build several targets",
        )
        parser.add_argument(
            "--platform",
            type=int,
            default=None,
            help="platform, also known as API level (default: 21)",
        )
        parser.add_argument(
            "-o", "--output-dir",
            default=None,
            metavar="DIR",
            help="output to a jniLibs directory in the correct sub-directories",
        )
        parser.add_argument(
            "--manifest-path",
            default=None,
            metavar="PATH",
            help="path to Cargo.toml",
        )
        parser.add_argument(
            "--link-builtins",
            action="store_true",
            help="link the clang builtins library",
        )
        parser.add_argument(
            "--link-libcxx-shared",
            action="store_true",
            help="copy libc++_shared.so into the output directory",
        )
        parser.add_argument(
            "--bindgen",
            action="store_true",
            help="export sysroot arguments for bindgen",
        )
        parser.add_argument(
            "--no-strip",
            action="store_true",
            help="keep debug symbols in the copied libraries",
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
        own_args, cargo_args = self.split_args(argv)
        args = self.build_parser().parse_args(own_args, namespace=CliNameSpace())
        args.cargo_args = cargo_args
        args.verbosity = Verbosity.from_args(argv)
        return args

    def resolve_manifest(self, args: CliNameSpace, metadata: CargoMetadata, working_dir) -> Path:
        """
        Manifest priority:
        1. --manifest-path
        2. the manifest of the package selected with -p/--package
        3. Cargo.toml in the working directory
        """
        if args.manifest_path:
            return Path(os.path.abspath(args.manifest_path))
        cargo_args = args.cargo_args
        for index, arg in enumerate(cargo_args):
            if arg == "--":
                break
            if arg in ("-p", "--package") and index + 1 < len(cargo_args):
                name = cargo_args[index + 1]
                manifest = metadata.package_manifest(name)
                if manifest is None:
                    raise NdkError(f"unknown package: {name}")
                return manifest
        return Path(working_dir, "Cargo.toml")

    def exec(self, context: CliContext, args: CliNameSpace):
        console = context.console
        console.verbosity = args.verbosity
        console.verbose("Using", f"cargo-ndk v{__version__}")

        if not args.cargo_args:
            console.error("No args found to pass to cargo!")
            console.note("You still need to specify build arguments to cargo to achieve anything. :)")
            sys.exit(1)

        environ = context.environ
        working_dir = Path(context.working_dir)
        try:
            cargo_bin = get_cargo_bin(environ)
            metadata = load_metadata(cargo_bin, args.manifest_path, cwd=working_dir)
            ndk_root, ndk_version = detect_ndk(environ, console)
            manifest_path = self.resolve_manifest(args, metadata, working_dir)
            config = load_ndk_config(manifest_path, is_release(args.cargo_args))

            output_dir = resolve_output_dir(args.output_dir or environ.get("CARGO_NDK_OUTPUT_DIR"))
            if output_dir is not None:
                console.verbose("Exporting", f"CARGO_NDK_OUTPUT_PATH={output_dir}")

            build = AndroidBuild(
                ndk_root=ndk_root,
                ndk_version=ndk_version,
                host_tag=get_ndk_host_tag(),
                platform=resolve_platform(args.platform, environ, config),
                targets=resolve_targets(args.target, environ, config),
                cargo_args=args.cargo_args,
                working_dir=working_dir,
                manifest_path=manifest_path,
                target_dir=metadata.target_directory,
                cargo_bin=cargo_bin,
                output_dir=output_dir,
                strip=not args.no_strip,
                link_builtins=args.link_builtins or env_flag(environ, "CARGO_NDK_LINK_BUILTINS"),
                link_libcxx_shared=args.link_libcxx_shared
                or env_flag(environ, "CARGO_NDK_LINK_LIBCXX_SHARED"),
                libgcc_workaround=not args.no_libgcc_workaround,
                bindgen=args.bindgen,
                environ=environ,
            )
            code = build_android(build, console)
        except NdkError as e:
            self.exit_with_error(console, e)

        if code != 0:
            sys.exit(exit_status(code))
