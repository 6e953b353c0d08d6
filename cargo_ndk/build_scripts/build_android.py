#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_android.py
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
Build a Rust crate for one or more Android ABIs.

For every requested ABI, in order:
1. Resolve the toolchain paths and compose the environment
2. Run cargo with ``--target <triple>`` and that environment
3. Collect the artifacts cargo reports
4. Copy (and strip) the cdylibs into the jniLibs output tree

Targets run one after another. The first failing cargo run stops the whole
build and its exit code becomes ours.
"""

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from cargo_ndk.build_scripts.build_artifacts import copy_artifacts
from cargo_ndk.build_scripts.build_utils import format_elapsed
from cargo_ndk.utils.cargo.invoke import invoke
from cargo_ndk.utils.cargo.metadata import Artifact, parse_message
from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.ndk.env import build_env
from cargo_ndk.utils.ndk.paths import resolve_paths
from cargo_ndk.utils.ndk.target import Target
from cargo_ndk.utils.ndk.version import NdkVersion, needs_libgcc_workaround

JSON_MESSAGE_FORMAT = "--message-format=json-render-diagnostics"


@dataclass
class AndroidBuild:
    """Everything needed to build a list of targets."""

    ndk_root: Path
    ndk_version: NdkVersion
    host_tag: str
    platform: int
    targets: List[Target]
    cargo_args: List[str]
    working_dir: Path
    manifest_path: Path
    target_dir: Path
    cargo_bin: str = "cargo"
    output_dir: Optional[Path] = None
    strip: bool = True
    link_builtins: bool = False
    link_libcxx_shared: bool = False
    libgcc_workaround: bool = True
    bindgen: bool = False
    environ: Optional[Mapping[str, str]] = None

    @property
    def link_compat_shim(self) -> bool:
        return self.libgcc_workaround and needs_libgcc_workaround(self.ndk_version)


def user_sets_message_format(cargo_args: List[str]) -> bool:
    for arg in cargo_args:
        if arg == "--":
            break
        if arg == "--message-format" or arg.startswith("--message-format="):
            return True
    return False


def build_target(build: AndroidBuild, target: Target, console: Console) -> Tuple[int, List[Artifact]]:
    """
    Compose the environment for ``target`` and run cargo once.

    Returns:
        tuple: (cargo exit code, collected artifacts)

    Raises:
        NdkError: the environment could not be composed; cargo did not run
    """
    triple = target.triple
    console.status("Building", f"{target} ({triple})")

    env = build_env(
        triple,
        build.ndk_root,
        build.host_tag,
        build.platform,
        link_compat_shim=build.link_compat_shim,
        generate_bindings=build.bindgen,
        target_dir=build.target_dir,
        environ=build.environ,
        link_builtins=build.link_builtins,
        output_dir=build.output_dir,
    )
    for key, value in env.items():
        console.very_verbose("Exporting", f"{key}={value!r}")

    artifacts = []
    if user_sets_message_format(build.cargo_args):
        extra_args = []
    else:
        extra_args = [JSON_MESSAGE_FORMAT]

    def on_line(line: str):
        artifact = parse_message(line)
        if artifact is not None:
            artifacts.append(artifact)
        elif not line.startswith("{"):
            # output of `cargo run` and friends
            print(line, file=sys.stdout, flush=True)

    code = invoke(
        build.cargo_args,
        triple,
        env,
        build.manifest_path,
        build.working_dir,
        cargo_bin=build.cargo_bin,
        extra_args=extra_args,
        on_stdout_line=on_line,
    )
    return code, artifacts


def build_android(build: AndroidBuild, console: Console) -> int:
    """
    Build every requested target, copying its libraries as soon as it is
    built.

    Returns:
        int: 0 on success, otherwise the exit code of the failing cargo run
    """
    console.verbose("Setting", f"Android SDK platform level to {build.platform}")
    console.verbose("Building", f"targets ({', '.join(str(t) for t in build.targets)})")
    before_time = time.time()

    built = []
    for target in build.targets:
        code, artifacts = build_target(build, target, console)
        if code != 0:
            console.note("If the build failed due to a missing target, you can run this command:")
            console.note("")
            console.note(f"    rustup target install {target.triple}")
            return code

        if build.output_dir is not None:
            console.status("Copying", f"{target} libraries to {build.output_dir}")
            paths = resolve_paths(build.ndk_root, build.host_tag, target.triple, build.platform)
            copy_artifacts(
                target,
                artifacts,
                build.output_dir,
                paths,
                console,
                strip=build.strip,
                link_libcxx_shared=build.link_libcxx_shared,
            )
        built.append(target)

    elapsed = format_elapsed(time.time() - before_time)
    console.verbose("Finished", f"targets ({', '.join(str(t) for t in built)}) in {elapsed}")
    return 0
