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
Tests for copying built libraries into the jniLibs tree.

Run with: python3 -m pytest cargo_ndk/build_scripts/test_build_artifacts.py
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from cargo_ndk.build_scripts.build_artifacts import (
    copy_artifacts,
    copy_file,
    is_fresh,
    resolve_output_dir,
)
from cargo_ndk.utils.cargo.metadata import Artifact
from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.ndk.errors import ArtifactError
from cargo_ndk.utils.ndk.paths import resolve_paths
from cargo_ndk.utils.ndk.target import Target


class ArtifactTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.out_dir = self.root / "jniLibs"
        self.console = Mock(spec=Console)
        self.paths = resolve_paths(self.root / "ndk", "linux-x86_64", "aarch64-linux-android", 21)
        strip_patcher = patch("cargo_ndk.build_scripts.build_artifacts.exec_command")
        self.mock_exec = strip_patcher.start()
        self.mock_exec.return_value = (0, "", "")
        self.addCleanup(strip_patcher.stop)

    def tearDown(self):
        self.temp_dir.cleanup()

    def make_library(self, name="libapp.so", content=b"\x7fELF"):
        path = self.root / "target" / "aarch64-linux-android" / "release" / name
        os.makedirs(path.parent, exist_ok=True)
        path.write_bytes(content)
        return path

    def make_artifact(self, library, crate_types=("cdylib",)):
        return Artifact(
            package_id="app 0.1.0",
            crate_types=list(crate_types),
            filenames=[str(library), str(library.with_suffix(".rlib"))],
        )


class TestCopyArtifacts(ArtifactTestCase):
    """Test copying, freshness and stripping."""

    def test_copy_and_strip(self):
        library = self.make_library()
        copied = copy_artifacts(
            Target.ARM64_V8A, [self.make_artifact(library)], self.out_dir, self.paths, self.console
        )
        dest = self.out_dir / "arm64-v8a" / "libapp.so"
        self.assertEqual(copied, [dest])
        self.assertEqual(dest.read_bytes(), b"\x7fELF")
        self.assertEqual(self.mock_exec.call_count, 1)
        (command,), _ = self.mock_exec.call_args
        self.assertEqual(command[0], os.fspath(self.paths.strip))
        # stripped beside the destination, before it is moved into place
        self.assertEqual(Path(command[1]).parent, dest.parent)
        self.assertNotEqual(Path(command[1]), dest)
        self.assertEqual(os.listdir(dest.parent), ["libapp.so"])

    def test_no_strip(self):
        library = self.make_library()
        copy_artifacts(
            Target.ARM64_V8A,
            [self.make_artifact(library)],
            self.out_dir,
            self.paths,
            self.console,
            strip=False,
        )
        self.mock_exec.assert_not_called()

    def test_fresh_destination_is_skipped(self):
        library = self.make_library()
        dest_dir = self.out_dir / "arm64-v8a"
        os.makedirs(dest_dir)
        dest = dest_dir / "libapp.so"
        dest.write_bytes(b"old")
        stat = os.stat(library)
        os.utime(dest, (stat.st_atime, stat.st_mtime + 10))

        copy_artifacts(Target.ARM64_V8A, [self.make_artifact(library)], self.out_dir, self.paths, self.console)
        self.assertEqual(dest.read_bytes(), b"old")
        self.console.status.assert_any_call("Fresh", f"{library}")
        self.mock_exec.assert_not_called()

    def test_stale_destination_is_replaced(self):
        library = self.make_library(content=b"new")
        dest_dir = self.out_dir / "arm64-v8a"
        os.makedirs(dest_dir)
        dest = dest_dir / "libapp.so"
        dest.write_bytes(b"old")
        stat = os.stat(library)
        os.utime(dest, (stat.st_atime, stat.st_mtime - 10))
        self.assertFalse(is_fresh(library, dest))

        copy_artifacts(Target.ARM64_V8A, [self.make_artifact(library)], self.out_dir, self.paths, self.console)
        self.assertEqual(dest.read_bytes(), b"new")

    def test_requires_cdylib(self):
        library = self.make_library()
        with self.assertRaises(ArtifactError) as ctx:
            copy_artifacts(
                Target.ARM64_V8A,
                [self.make_artifact(library, crate_types=("rlib",))],
                self.out_dir,
                self.paths,
                self.console,
            )
        self.assertIn("crate-type", str(ctx.exception))

    def test_link_libcxx_shared(self):
        library = self.make_library()
        os.makedirs(self.paths.sysroot_libs)
        self.paths.libcxx_shared.write_bytes(b"libc++")
        copied = copy_artifacts(
            Target.ARM64_V8A,
            [self.make_artifact(library)],
            self.out_dir,
            self.paths,
            self.console,
            link_libcxx_shared=True,
        )
        self.assertEqual(copied[-1], self.out_dir / "arm64-v8a" / "libc++_shared.so")
        self.assertEqual(copied[-1].read_bytes(), b"libc++")
        # only the crate's own library is stripped
        self.assertEqual(self.mock_exec.call_count, 1)

    def test_strip_failure(self):
        library = self.make_library()
        self.mock_exec.return_value = (1, "", "llvm-strip: error: not an ELF file")
        with self.assertRaises(ArtifactError):
            copy_file(library, self.root / "libapp.so", self.console, self.paths.strip)

    def test_strip_failure_is_retried(self):
        library = self.make_library()
        dest = self.root / "libapp.so"
        self.mock_exec.return_value = (1, "", "llvm-strip: error: not an ELF file")
        with self.assertRaises(ArtifactError):
            copy_file(library, dest, self.console, self.paths.strip)
        self.assertFalse(dest.exists())
        self.assertEqual([n for n in os.listdir(self.root) if n.startswith(".")], [])

        self.mock_exec.return_value = (0, "", "")
        self.assertTrue(copy_file(library, dest, self.console, self.paths.strip))
        self.assertEqual(dest.read_bytes(), b"\x7fELF")
        self.assertEqual(self.mock_exec.call_count, 2)


class TestOutputDir(unittest.TestCase):
    """Test output directory creation."""

    def test_none(self):
        self.assertIsNone(resolve_output_dir(None))

    def test_created_and_absolute(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            cwd = os.getcwd()
            os.chdir(temp_dir)
            try:
                out = resolve_output_dir(os.path.join("app", "jniLibs"))
            finally:
                os.chdir(cwd)
            self.assertTrue(out.is_absolute())
            self.assertTrue(out.is_dir())
            self.assertEqual(out, Path(os.path.realpath(temp_dir), "app", "jniLibs"))


if __name__ == "__main__":
    unittest.main()
