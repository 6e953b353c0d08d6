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
Tests for the per-target build loop.

Run with: python3 -m pytest cargo_ndk/build_scripts/test_build_android.py
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from cargo_ndk.build_scripts.build_android import (
    JSON_MESSAGE_FORMAT,
    AndroidBuild,
    build_android,
    user_sets_message_format,
)
from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.ndk.target import Target
from cargo_ndk.utils.ndk.version import NdkVersion

ARTIFACT_LINE = json.dumps({
    "reason": "compiler-artifact",
    "package_id": "app 0.1.0",
    "target": {"crate_types": ["cdylib"], "src_path": "/work/src/lib.rs"},
    "filenames": ["/work/target/aarch64-linux-android/debug/libapp.so"],
    "executable": None,
})


class TestBuildAndroid(unittest.TestCase):
    """Test the order of targets, failure handling and post-processing."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.console = Mock(spec=Console)
        self.build = AndroidBuild(
            ndk_root=root / "ndk",
            ndk_version=NdkVersion.parse("26.1.10909125"),
            host_tag="linux-x86_64",
            platform=21,
            targets=[Target.ARM64_V8A, Target.X86_64],
            cargo_args=["build", "--", "-C", "opt-level=s"],
            working_dir=root,
            manifest_path=root / "Cargo.toml",
            target_dir=root / "target",
            environ={},
        )

    def tearDown(self):
        self.temp_dir.cleanup()

    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_targets_in_order(self, mock_invoke):
        mock_invoke.return_value = 0
        self.assertEqual(build_android(self.build, self.console), 0)
        triples = [c[0][1] for c in mock_invoke.call_args_list]
        self.assertEqual(triples, ["aarch64-linux-android", "x86_64-linux-android"])
        for c in mock_invoke.call_args_list:
            self.assertEqual(c[0][0], ["build", "--", "-C", "opt-level=s"])
            self.assertEqual(c[1]["extra_args"], [JSON_MESSAGE_FORMAT])

    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_environment_per_target(self, mock_invoke):
        mock_invoke.return_value = 0
        build_android(self.build, self.console)
        first_env = mock_invoke.call_args_list[0][0][2]
        second_env = mock_invoke.call_args_list[1][0][2]
        self.assertIn("CC_aarch64-linux-android", first_env)
        self.assertNotIn("CC_aarch64-linux-android", second_env)
        self.assertIn("CC_x86_64-linux-android", second_env)
        # NDK r26 gets the libgcc shim
        self.assertIn("-L", first_env["RUSTFLAGS"])

    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_no_libgcc_workaround(self, mock_invoke):
        mock_invoke.return_value = 0
        self.build.libgcc_workaround = False
        build_android(self.build, self.console)
        self.assertNotIn("RUSTFLAGS", mock_invoke.call_args_list[0][0][2])

    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_fail_fast_with_child_code(self, mock_invoke):
        mock_invoke.return_value = 101
        self.assertEqual(build_android(self.build, self.console), 101)
        self.assertEqual(mock_invoke.call_count, 1)
        self.console.note.assert_any_call("    rustup target install aarch64-linux-android")

    @patch("cargo_ndk.build_scripts.build_android.copy_artifacts")
    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_copy_after_each_target(self, mock_invoke, mock_copy):
        def fake_invoke(*args, **kwargs):
            kwargs["on_stdout_line"](ARTIFACT_LINE)
            kwargs["on_stdout_line"]('{"reason":"build-finished","success":true}')
            return 0

        mock_invoke.side_effect = fake_invoke
        self.build.output_dir = Path(self.temp_dir.name, "jniLibs")
        self.build.strip = False
        build_android(self.build, self.console)

        self.assertEqual(mock_copy.call_count, 2)
        target, artifacts, output_dir = mock_copy.call_args_list[0][0][:3]
        self.assertIs(target, Target.ARM64_V8A)
        self.assertEqual(len(artifacts), 1)
        self.assertTrue(artifacts[0].is_cdylib)
        self.assertEqual(output_dir, self.build.output_dir)
        self.assertFalse(mock_copy.call_args_list[0][1]["strip"])

    @patch("cargo_ndk.build_scripts.build_android.copy_artifacts")
    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_no_copy_without_output_dir(self, mock_invoke, mock_copy):
        mock_invoke.return_value = 0
        build_android(self.build, self.console)
        mock_copy.assert_not_called()

    @patch("cargo_ndk.build_scripts.build_android.invoke")
    def test_user_message_format_is_kept(self, mock_invoke):
        mock_invoke.return_value = 0
        self.build.cargo_args = ["build", "--message-format=short"]
        build_android(self.build, self.console)
        self.assertEqual(mock_invoke.call_args_list[0][1]["extra_args"], [])

    def test_user_sets_message_format(self):
        self.assertTrue(user_sets_message_format(["build", "--message-format", "json"]))
        self.assertFalse(user_sets_message_format(["build", "--", "--message-format=json"]))


if __name__ == "__main__":
    unittest.main()
