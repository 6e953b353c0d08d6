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
import sys
import importlib
from typing import List, Optional

from cargo_ndk.utils.context.namespace import CliNameSpace
from cargo_ndk.utils.context.context import CliContext
from cargo_ndk.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]

# cargo runs `cargo-ndk-env ndk-env <args>` for `cargo ndk-env <args>`
CARGO_SUBCOMMANDS = {
    "ndk": "build",
    "ndk-env": "env",
    "ndk-test": "test",
    "ndk-runner": "runner",
}


# Root Class for Command Line Interface
class Cli(CliCommand):
    def __init__(self, default_subcommand: str = "build"):
        self.default_subcommand = default_subcommand

    def description(self) -> str:
        return """cargo-ndk - Build Rust code for Android using the NDK

USAGE:
    cargo ndk [options] <cargo args>
    cargo ndk-env [options]
    cargo ndk-test [options] [cargo args] [-- test args]
    cargo ndk-runner [options] <executable> [args]

EXAMPLES:
    cargo ndk -t arm64-v8a -o ./app/src/main/jniLibs build --release
    source <(cargo ndk-env -t arm64-v8a)
    cargo ndk-test -t x86_64

For more information on a specific command:
    cargo ndk --help
    cargo ndk-env --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if not command.startswith("_") and not command.startswith("test_") and command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        argv = list(sys.argv[1:] if argv is None else argv)
        subcommand = self.default_subcommand
        # drop the subcommand token cargo passes along
        if argv and argv[0] in CARGO_SUBCOMMANDS:
            subcommand = CARGO_SUBCOMMANDS[argv.pop(0)]
        args = CliNameSpace()
        args.subcommand = subcommand
        args.argv = argv
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if args.subcommand not in self.get_command_list():
            context.console.error(f"Unknown command: {args.subcommand}")
            sys.exit(2)
        # get module name
        module_name = f"cargo_ndk.commands.{args.subcommand}"
        # get class name
        class_name = args.subcommand.capitalize()
        # import module
        module = importlib.import_module(module_name)
        # get class of module
        klass = getattr(module, class_name)
        # instance class
        sub_cmd = klass()
        # now execute the subcommand
        sub_cmd.exec(context, sub_cmd.cli(args.argv))


def _run(default_subcommand: str):
    cmd = Cli(default_subcommand)
    cmd.exec(CliContext(), cmd.cli())


def main():
    _run("build")


def main_env():
    _run("env")


def main_test():
    _run("test")


def main_runner():
    _run("runner")


if __name__ == "__main__":
    main()
