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
import json
import re
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from cargo_ndk import __version__
from cargo_ndk.build_scripts.build_utils import (
    detect_ndk,
    env_flag,
    get_ndk_host_tag,
    resolve_platform,
    resolve_targets,
)
from cargo_ndk.utils.cargo.config import load_ndk_config
from cargo_ndk.utils.context.command import CliCommand
from cargo_ndk.utils.context.console import Verbosity
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.ndk.env import build_env
from cargo_ndk.utils.ndk.errors import NdkError
from cargo_ndk.utils.ndk.version import needs_libgcc_workaround


def shell_key(key: str) -> str:
    # cc-rs reads CC_aarch64_linux_android as well as CC_aarch64-linux-android
    return key.replace("-", "_")


def shell_quote(value: str) -> str:
    """Double quoted for POSIX shells; control characters stay verbatim."""
    return '"' + re.sub(r'([\\"$`])', r"\\\1", value) + '"'


def powershell_quote(value: str) -> str:
    """Double quoted for PowerShell, whose escape character is the backtick."""
    return '"' + re.sub(r'([`"$])', r"`\1", value) + '"'


def format_shell(env: Mapping[str, str]) -> str:
    lines = [f"export {shell_key(k)}={shell_quote(v)}" for k, v in sorted(env.items())]
    lines += [
        "",
        "# To import with bash/zsh/etc:",
        "#     source <(cargo ndk-env)",
    ]
    return "\n".join(lines)


def format_powershell(env: Mapping[str, str]) -> str:
    lines = [f"${{env:{k}}}={powershell_quote(v)}" for k, v in sorted(env.items())]
    lines += [
        "",
        "# To import with PowerShell:",
        "#     cargo ndk-env --powershell | Out-String | Invoke-Expression",
    ]
    return "\n".join(lines)


def format_json(env: Mapping[str, str]) -> str:
    return json.dumps(dict(env), indent=2, sort_keys=True)


class Env(CliCommand):
    def description(self) -> str:
        return """Print the environment cargo-ndk would set for one target.

Useful to drive cargo, cmake or an IDE directly with the NDK toolchain.
Nothing is built.

EXAMPLES:
    source <(cargo ndk-env -t arm64-v8a)
    cargo ndk-env -t x86_64 --platform 26 --json
    cargo ndk-env -t armeabi-v7a --powershell | Out-String | Invoke-Expression
        """

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="cargo ndk-env",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "-t", "--target",
            default=None,
            help="triple for the target, Rust or Android name (i.e. arm64-v8a); "
            "defaults to CARGO_NDK_TARGET",
        )
        parser.add_argument(
            "--platform",
            type=int,
            default=None,
            help="platform, also known as API level (default: 21)",
        )
        parser.add_argument(
            "--link-builtins",
            action="store_true",
            help="link the clang builtins library",
        )
        parser.add_argument(
            "--bindgen",
            action="store_true",
            help="export sysroot arguments for bindgen",
        )
        parser.add_argument(
            "--no-libgcc-workaround",
            action="store_true",
            help="do not redirect libgcc to libunwind",
        )
        output = parser.add_mutually_exclusive_group()
        output.add_argument(
            "--powershell",
            action="store_true",
            help="use PowerShell syntax",
        )
        output.add_argument(
            "--json",
            action="store_true",
            help="print output in JSON format",
        )
        # accepted here so they never reach argparse as unknown options
        parser.add_argument("-v", "--verbose", action="count", default=0, help=argparse.SUPPRESS)
        parser.add_argument("-vv", dest="very_verbose", action="store_true", help=argparse.SUPPRESS)
        parser.add_argument("-q", "--quiet", action="store_true", help=argparse.SUPPRESS)
        parser.add_argument(
            "-V", "--version",
            action="version",
            version=f"cargo-ndk {__version__}",
        )
        return parser

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        if argv is None:
            argv = sys.argv[1:]
        args = self.build_parser().parse_args(argv, namespace=CliNameSpace())
        args.verbosity = Verbosity.from_args(argv)
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        console = context.console
        console.verbosity = args.verbosity
        environ = context.environ
        working_dir = Path(context.working_dir)

        try:
            ndk_root, ndk_version = detect_ndk(environ, console)
            config = load_ndk_config(working_dir / "Cargo.toml")
            targets = resolve_targets([args.target] if args.target else None, environ, config)
            if args.target is None and "CARGO_NDK_TARGET" not in environ and len(targets) > 1:
                console.note(f"No target given, printing the environment for {targets[0]}")
            target = targets[0]
            target_dir = environ.get("CARGO_TARGET_DIR") or working_dir / "target"

            env = build_env(
                target.triple,
                ndk_root,
                get_ndk_host_tag(),
                resolve_platform(args.platform, environ, config),
                link_compat_shim=not args.no_libgcc_workaround and needs_libgcc_workaround(ndk_version),
                generate_bindings=args.bindgen,
                target_dir=target_dir,
                environ=environ,
                link_builtins=args.link_builtins or env_flag(environ, "CARGO_NDK_LINK_BUILTINS"),
            )
        except NdkError as e:
            self.exit_with_error(console, e)

        if args.json:
            print(format_json(env))
        elif args.powershell:
            print(format_powershell(env))
        else:
            print(format_shell(env))
