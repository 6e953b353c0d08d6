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
Tests for [package.metadata.ndk] configuration.

Run with: python3 -m pytest cargo_ndk/utils/cargo/test_config.py
"""

import os
import tempfile
import unittest

from cargo_ndk.utils.cargo.config import (
    DEFAULT_PLATFORM,
    NdkConfig,
    load_ndk_config,
    ndk_config_from_dict,
)
from cargo_ndk.utils.ndk.errors import NdkError, UnsupportedTargetError
from cargo_ndk.utils.ndk.target import DEFAULT_TARGETS, Target

CARGO_TOML = """
[package]
name = "demo"
version = "0.1.0"

[package.metadata.ndk]
platform = 26
targets = ["arm64-v8a", "x86_64-linux-android"]

[package.metadata.ndk.debug]
targets = ["x86_64"]
"""


class TestNdkConfig(unittest.TestCase):
    """Test reading per-project defaults."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.manifest = os.path.join(self.temp_dir.name, "Cargo.toml")

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_manifest(self, content):
        with open(self.manifest, "w") as f:
            f.write(content)

    def test_missing_manifest_gives_defaults(self):
        config = load_ndk_config(self.manifest)
        self.assertEqual(config, NdkConfig())
        self.assertEqual(config.platform, DEFAULT_PLATFORM)
        self.assertEqual(config.targets, DEFAULT_TARGETS)

    def test_release_targets(self):
        self.write_manifest(CARGO_TOML)
        config = load_ndk_config(self.manifest, is_release=True)
        self.assertEqual(config.platform, 26)
        self.assertEqual(config.targets, [Target.ARM64_V8A, Target.X86_64])

    def test_debug_override(self):
        self.write_manifest(CARGO_TOML)
        config = load_ndk_config(self.manifest, is_release=False)
        self.assertEqual(config.targets, [Target.X86_64])

    def test_no_ndk_table(self):
        self.write_manifest('[package]\nname = "demo"\n')
        self.assertEqual(load_ndk_config(self.manifest), NdkConfig())

    def test_invalid_toml(self):
        self.write_manifest("[package\n")
        with self.assertRaises(NdkError):
            load_ndk_config(self.manifest)

    def test_invalid_values(self):
        with self.assertRaises(NdkError):
            ndk_config_from_dict({"package": {"metadata": {"ndk": {"platform": "21"}}}}, False)
        with self.assertRaises(NdkError):
            ndk_config_from_dict({"package": {"metadata": {"ndk": {"targets": "x86"}}}}, False)
        with self.assertRaises(UnsupportedTargetError):
            ndk_config_from_dict({"package": {"metadata": {"ndk": {"targets": ["mips"]}}}}, False)


if __name__ == "__main__":
    unittest.main()
