#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_utils.py
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
Host and SDK helpers shared by the cargo-ndk commands.

This module provides:
- Host platform detection and the NDK prebuilt host tag
- NDK discovery from environment variables and standard locations
- NDK version detection and the minimum version gate
- adb discovery
"""

import os
import platform
import shutil
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from cargo_ndk.utils.cargo.config import NdkConfig
from cargo_ndk.utils.context.console import Console
from cargo_ndk.utils.ndk.errors import NdkError, NdkNotFoundError
from cargo_ndk.utils.ndk.target import Target, parse_target_list
from cargo_ndk.utils.ndk.version import NdkVersion, ensure_supported, parse_version

NDK_VARS = ["ANDROID_NDK_HOME", "ANDROID_NDK_ROOT", "ANDROID_NDK_PATH", "NDK_HOME"]

SDK_VARS = ["ANDROID_HOME", "ANDROID_SDK_ROOT", "ANDROID_SDK_HOME"]


def system_is_windows():
    """Check if current platform is Windows."""
    return platform.system().lower() == "windows"


def system_is_macos():
    """Check if current platform is macOS/Darwin."""
    return platform.system().lower() == "darwin"


def get_ndk_host_tag():
    """
    Get the NDK host platform tag for toolchain paths.

    Returns:
        str: "darwin-x86_64", "linux-x86_64" or "windows-x86_64"

    Note:
        The NDK only ships x86_64 host directories; on Apple silicon the
        darwin-x86_64 tree contains universal binaries.
    """
    if system_is_windows():
        return "windows-x86_64"
    if system_is_macos():
        return "darwin-x86_64"
    return "linux-x86_64"


def find_first_consistent_var_set(
    names: Sequence[str],
    environ: Mapping[str, str],
    console: Optional[Console] = None,
) -> Optional[Tuple[str, str]]:
    """
    Return the name and value of the first variable in ``names`` that is set.

    Variables set later in the list which disagree with the first one are
    reported as a warning, never used.
    """
    first = None
    for name in names:
        value = environ.get(name)
        if value is None:
            continue
        if first is None:
            first = (name, value)
        elif first[1] != value and console is not None:
            console.warn(f"Environment variable `{first[0]} = {first[1]}` doesn't match `{name} = {value}`")
    return first


def highest_version_ndk_in_path(ndk_dir) -> Optional[Path]:
    """
    Pick the highest semver-named sub-directory, e.g. ``<sdk>/ndk/26.1.10909125``.
    """
    if not os.path.isdir(ndk_dir):
        return None
    best = None
    for name in os.listdir(ndk_dir):
        path = Path(ndk_dir, name)
        if not path.is_dir():
            continue
        try:
            version = NdkVersion.parse(name)
        except NdkError:
            continue
        if best is None or version.sort_key > best[0].sort_key:
            best = (version, path)
    return best[1] if best else None


def default_ndk_dir() -> Path:
    home = Path.home()
    if system_is_windows():
        local = os.environ.get("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return Path(local, "Android", "sdk", "ndk")
    if system_is_macos():
        return home / "Library" / "Android" / "sdk" / "ndk"
    return home / "Android" / "Sdk" / "ndk"


def derive_ndk_path(environ: Mapping[str, str], console: Optional[Console] = None) -> Tuple[Path, str]:
    """
    Find the NDK to use and describe how it was found.

    Order:
    1. ANDROID_NDK_HOME, ANDROID_NDK_ROOT, ANDROID_NDK_PATH, NDK_HOME; a
       directory of versioned NDKs resolves to its highest version
    2. <sdk>/ndk/<highest version> for ANDROID_HOME, ANDROID_SDK_ROOT,
       ANDROID_SDK_HOME
    3. the standard Android Studio location

    Raises:
        NdkNotFoundError: nothing matched
    """
    found = find_first_consistent_var_set(NDK_VARS, environ, console)
    if found:
        name, value = found
        return highest_version_ndk_in_path(value) or Path(value), name

    found = find_first_consistent_var_set(SDK_VARS, environ, console)
    if found:
        name, value = found
        ndk = highest_version_ndk_in_path(Path(value, "ndk"))
        if ndk is not None:
            return ndk, name

    ndk = highest_version_ndk_in_path(default_ndk_dir())
    if ndk is not None:
        return ndk, "standard location"
    raise NdkNotFoundError()


def detect_ndk(environ: Mapping[str, str], console: Console) -> Tuple[Path, NdkVersion]:
    """
    Find the NDK and check that its version is supported.

    Raises:
        NdkError: not found, unreadable version, or older than r23
    """
    ndk_home, method = derive_ndk_path(environ, console)
    try:
        version = parse_version(ndk_home)
    except NdkError:
        console.error(f"Error detecting NDK version for path {ndk_home}")
        raise
    console.verbose("Detected", f"NDK v{version} ({ndk_home}) [{method}]")
    return ndk_home, ensure_supported(version)


def derive_adb_path(environ: Mapping[str, str], console: Optional[Console] = None) -> Path:
    """
    Resolve adb from the SDK platform-tools, falling back to PATH.

    Raises:
        NdkError: adb could not be found
    """
    found = find_first_consistent_var_set(SDK_VARS, environ, console)
    if found:
        adb = Path(found[1], "platform-tools", "adb.exe" if system_is_windows() else "adb")
        if adb.exists():
            return adb

    adb = shutil.which("adb")
    if adb:
        return Path(adb)
    raise NdkError("Could not find adb. Please set ANDROID_HOME or ensure adb is in your PATH.")


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def format_elapsed(elapsed: float) -> str:
    """``1m 05s`` from a minute on, ``4.27s`` below."""
    secs = int(elapsed)
    if secs >= 60:
        return f"{secs // 60}m {secs % 60:02d}s"
    return f"{elapsed:.2f}s"


def resolve_targets(cli_targets, environ: Mapping[str, str], config: NdkConfig) -> List[Target]:
    """
    Targets from -t flags (repeatable, comma lists), then CARGO_NDK_TARGET,
    then ``[package.metadata.ndk]``.
    """
    if cli_targets:
        targets = []
        for value in cli_targets:
            targets.extend(parse_target_list(value))
        if targets:
            return targets
    value = environ.get("CARGO_NDK_TARGET")
    if value:
        targets = parse_target_list(value)
        if targets:
            return targets
    return list(config.targets)


def resolve_platform(cli_platform: Optional[int], environ: Mapping[str, str], config: NdkConfig) -> int:
    """--platform, then CARGO_NDK_PLATFORM, then ``[package.metadata.ndk]``."""
    if cli_platform is not None:
        return cli_platform
    value = environ.get("CARGO_NDK_PLATFORM")
    if value:
        try:
            return int(value)
        except ValueError:
            raise NdkError(f"CARGO_NDK_PLATFORM must be an integer, got '{value}'") from None
    return config.platform
