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
Tests for cargo metadata and artifact message parsing.

Run with: python3 -m pytest cargo_ndk/utils/cargo/test_metadata.py
"""

import json
import unittest
from pathlib import Path
from unittest.mock import patch

from cargo_ndk.utils.cargo.metadata import load_metadata, parse_message
from cargo_ndk.utils.ndk.errors import CargoMetadataError

METADATA = {
    "packages": [
        {"name": "app", "manifest_path": "/work/app/Cargo.toml"},
        {"name": "core", "manifest_path": "/work/core/Cargo.toml"},
    ],
    "target_directory": "/work/target",
    "workspace_root": "/work",
}

CDYLIB_MESSAGE = {
    "reason": "compiler-artifact",
    "package_id": "app 0.1.0 (path+file:///work/app)",
    "manifest_path": "/work/app/Cargo.toml",
    "target": {
        "name": "app",
        "kind": ["cdylib", "rlib"],
        "crate_types": ["cdylib", "rlib"],
        "src_path": "/work/app/src/lib.rs",
    },
    "filenames": [
        "/work/target/aarch64-linux-android/release/libapp.so",
        "/work/target/aarch64-linux-android/release/libapp.rlib",
    ],
    "executable": None,
    "fresh": False,
}


class TestLoadMetadata(unittest.TestCase):
    """Test running cargo metadata."""

    @patch("cargo_ndk.utils.cargo.metadata.exec_command")
    def test_parse(self, mock_exec):
        mock_exec.return_value = (0, json.dumps(METADATA), "")
        metadata = load_metadata("cargo", cwd="/work")
        mock_exec.assert_called_once_with(
            ["cargo", "metadata", "--format-version", "1", "--no-deps"], cwd="/work"
        )
        self.assertEqual(metadata.target_directory, Path("/work/target"))
        self.assertEqual(metadata.package_manifest("core"), Path("/work/core/Cargo.toml"))
        self.assertIsNone(metadata.package_manifest("missing"))

    @patch("cargo_ndk.utils.cargo.metadata.exec_command")
    def test_manifest_path_is_forwarded(self, mock_exec):
        mock_exec.return_value = (0, json.dumps(METADATA), "")
        load_metadata("cargo", manifest_path="/work/app/Cargo.toml")
        command = mock_exec.call_args[0][0]
        self.assertEqual(command[-2:], ["--manifest-path", "/work/app/Cargo.toml"])

    @patch("cargo_ndk.utils.cargo.metadata.exec_command")
    def test_cargo_failure(self, mock_exec):
        mock_exec.return_value = (101, "", "error: could not find `Cargo.toml`\n")
        with self.assertRaises(CargoMetadataError) as ctx:
            load_metadata("cargo")
        self.assertIn("could not find `Cargo.toml`", str(ctx.exception))

    @patch("cargo_ndk.utils.cargo.metadata.exec_command")
    def test_garbage_output(self, mock_exec):
        mock_exec.return_value = (0, "not json", "")
        with self.assertRaises(CargoMetadataError):
            load_metadata("cargo")


class TestParseMessage(unittest.TestCase):
    """Test picking compiler-artifact messages out of cargo's stdout."""

    def test_cdylib(self):
        artifact = parse_message(json.dumps(CDYLIB_MESSAGE))
        self.assertTrue(artifact.is_cdylib)
        self.assertEqual(
            artifact.shared_library(),
            Path("/work/target/aarch64-linux-android/release/libapp.so"),
        )
        self.assertEqual(artifact.src_path, "/work/app/src/lib.rs")

    def test_test_executable(self):
        message = dict(CDYLIB_MESSAGE)
        message["target"] = {"crate_types": ["bin"], "src_path": "/work/app/src/main.rs"}
        message["filenames"] = ["/work/target/debug/deps/app-1234"]
        message["executable"] = "/work/target/debug/deps/app-1234"
        artifact = parse_message(json.dumps(message))
        self.assertFalse(artifact.is_cdylib)
        self.assertIsNone(artifact.shared_library())
        self.assertEqual(artifact.executable, "/work/target/debug/deps/app-1234")

    def test_other_lines(self):
        self.assertIsNone(parse_message('{"reason":"build-finished","success":true}'))
        self.assertIsNone(parse_message("   Compiling app v0.1.0"))
        self.assertIsNone(parse_message("{not json"))


if __name__ == "__main__":
    unittest.main()
