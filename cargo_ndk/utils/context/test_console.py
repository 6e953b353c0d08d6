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
Tests for console output and command line helpers.

Run with: python3 -m pytest cargo_ndk/utils/context/test_console.py
"""

import io
import unittest
from unittest.mock import patch

from cargo_ndk.utils.context.command import CliCommand
from cargo_ndk.utils.context.console import Console, Verbosity
from cargo_ndk.utils.ndk.errors import NdkError


class TestVerbosity(unittest.TestCase):
    """Test verbosity detection from raw arguments."""

    def test_levels(self):
        self.assertEqual(Verbosity.from_args(["build"]), Verbosity.NORMAL)
        self.assertEqual(Verbosity.from_args(["-v", "build"]), Verbosity.VERBOSE)
        self.assertEqual(Verbosity.from_args(["build", "--verbose"]), Verbosity.VERBOSE)
        self.assertEqual(Verbosity.from_args(["build", "-vv"]), Verbosity.VERY_VERBOSE)
        self.assertEqual(Verbosity.from_args(["-q", "-v", "build"]), Verbosity.QUIET)

    def test_passthrough_is_ignored(self):
        self.assertEqual(Verbosity.from_args(["build", "--", "-q"]), Verbosity.NORMAL)


class TestConsole(unittest.TestCase):
    """Test what each verbosity prints."""

    def output(self, verbosity, action):
        with patch("sys.stderr", new_callable=io.StringIO) as stderr:
            action(Console(verbosity))
        return stderr.getvalue()

    def test_status_alignment(self):
        out = self.output(Verbosity.NORMAL, lambda c: c.status("Building", "arm64-v8a"))
        self.assertEqual(out, "    Building arm64-v8a\n")

    def test_quiet_keeps_errors(self):
        def action(console):
            console.status("Building", "arm64-v8a")
            console.note("hint")
            console.error("boom")
            console.warn("careful")
        out = self.output(Verbosity.QUIET, action)
        self.assertEqual(out, "ERROR: boom\nWARNING: careful\n")

    def test_verbose_levels(self):
        def action(console):
            console.verbose("Detected", "NDK")
            console.very_verbose("Exporting", "CC")
        self.assertEqual(self.output(Verbosity.NORMAL, action), "")
        self.assertEqual(self.output(Verbosity.VERBOSE, action), "    Detected NDK\n")
        self.assertIn("Exporting CC", self.output(Verbosity.VERY_VERBOSE, action))


class SplitCommand(CliCommand):
    VALUE_FLAGS = ["-t", "--target", "--platform"]
    SWITCH_FLAGS = ["--bindgen"]


class TestCliCommand(unittest.TestCase):
    """Test the shared argument splitting and error exit."""

    def test_split_args(self):
        own, forwarded = SplitCommand().split_args(
            ["-t", "x86", "build", "--bindgen", "--platform=26", "--release", "--", "-t", "y"]
        )
        self.assertEqual(own, ["-t", "x86", "--bindgen", "--platform=26"])
        self.assertEqual(forwarded, ["build", "--release", "--", "-t", "y"])

    def test_exit_with_error(self):
        with patch.object(Console, "_write") as mock_write:
            with self.assertRaises(SystemExit) as ctx:
                SplitCommand().exit_with_error(Console(), NdkError("broken", hint="fix it"))
        self.assertEqual(ctx.exception.code, 1)
        lines = [c[0][0] for c in mock_write.call_args_list]
        self.assertEqual(lines, ["ERROR: broken", "NOTE: fix it"])


if __name__ == "__main__":
    unittest.main()
