#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_artifacts.py
# cargo-ndk-py
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
Copy built shared libraries into a jniLibs style output tree.

Output layout:
    <output_dir>/arm64-v8a/libfoo.so
    <output_dir>/armeabi-v7a/libfoo.so
    ...

Only ``cdylib`` artifacts are copied. A copy is skipped when the destination
is at least as new as the source, and copies are stripped with llvm-strip
unless stripping is turned off.
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from cargo_ndk.utils.cargo.metadata import Artifact
from cargo_ndk.utils.cmd.cmd_util import exec_command
from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.ndk.errors import ArtifactError
from cargo_ndk.utils.ndk.paths import ResolvedPaths
from cargo_ndk.utils.ndk.target import Target


def is_fresh(src, dest) -> bool:
    """True when ``dest`` exists and is not older than ``src``."""
    if not os.path.exists(dest):
        return False
    try:
        return os.stat(src).st_mtime <= os.stat(dest).st_mtime
    except OSError as e:
        raise ArtifactError(f"failed getting metadata for {src} or {dest}: {e}") from e


def strip_library(strip_path, lib_path, console: Console):
    """
    Strip debug symbols from ``lib_path`` in place.

    Raises:
        ArtifactError: llvm-strip exited non-zero
    """
    console.verbose("Stripping", f"{lib_path}")
    code, _, stderr = exec_command([os.fspath(strip_path), os.fspath(lib_path)])
    if code != 0:
        raise ArtifactError(f"failed to strip {lib_path}: {stderr.strip()}")


def copy_file(src, dest, console: Console, strip_path=None) -> bool:
    """
    Copy one library unless the destination is fresh.

    The copy is stripped under a temporary name beside ``dest`` and only
    then renamed onto it, so a failed strip never leaves a fresh looking
    unstripped library behind.

    Returns:
        bool: True if the file was copied, False if it was fresh
    """
    if is_fresh(src, dest):
        console.status("Fresh", f"{src}")
        return False
    console.verbose("Copying", f"{src} -> {dest}")
    tmp_dest = Path(dest).with_name(f".{Path(dest).name}.{os.getpid()}.tmp")
    try:
        try:
            shutil.copyfile(src, tmp_dest)
        except OSError as e:
            raise ArtifactError(f"failed to copy {src} over to {dest}: {e}") from e
        if strip_path is not None:
            strip_library(strip_path, tmp_dest, console)
        try:
            os.replace(tmp_dest, dest)
        except OSError as e:
            raise ArtifactError(f"failed to copy {src} over to {dest}: {e}") from e
    finally:
        if tmp_dest.exists():
            tmp_dest.unlink()
    return True


def copy_artifacts(
    target: Target,
    artifacts: Sequence[Artifact],
    output_dir,
    paths: ResolvedPaths,
    console: Console,
    strip: bool = True,
    link_libcxx_shared: bool = False,
) -> List[Path]:
    """
    Copy the cdylib outputs of one target into ``<output_dir>/<abi>/``.

    Args:
        target: target the artifacts were built for
        artifacts: compiler-artifact messages collected from cargo
        output_dir: root of the jniLibs tree
        paths: resolved toolchain paths, for llvm-strip and libc++_shared.so
        console: output sink
        strip: strip debug symbols from the copies
        link_libcxx_shared: also ship libc++_shared.so

    Returns:
        list: destination paths, copied or fresh

    Raises:
        ArtifactError: no cdylib was produced, or copying/stripping failed
    """
    arch_output_dir = Path(output_dir, target.display)
    try:
        arch_output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactError(f"failed to create output dir {arch_output_dir}: {e}") from e

    console.very_verbose("Note", f"artifacts for {target}: {[a.package_id for a in artifacts]}")

    libraries = [a for a in artifacts if a.is_cdylib]
    if not libraries:
        raise ArtifactError(
            "No usable artifacts produced by cargo\n"
            "Did you set the crate-type in Cargo.toml to include 'cdylib'?\n"
            "For more info, see <https://doc.rust-lang.org/cargo/reference/cargo-targets.html#library>."
        )

    strip_path = paths.strip if strip else None
    copied = []
    for artifact in libraries:
        library = artifact.shared_library()
        if library is None:
            raise ArtifactError(f"No cdylib file found to copy for {artifact.package_id}")
        dest = arch_output_dir / library.name
        copy_file(library, dest, console, strip_path)
        copied.append(dest)

    if link_libcxx_shared:
        dest = arch_output_dir / paths.libcxx_shared.name
        copy_file(paths.libcxx_shared, dest, console)
        copied.append(dest)

    return copied


def resolve_output_dir(output_dir) -> Optional[Path]:
    """
    Create the output directory and return it as an absolute path.

    Build scripts receive it through CARGO_NDK_OUTPUT_PATH and may run in a
    different working directory, hence the absolute path.
    """
    if output_dir is None:
        return None
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise ArtifactError(f"failed to create output dir, {e}") from e
    return Path(os.path.realpath(output_dir))
