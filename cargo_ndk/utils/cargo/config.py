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
Per-project defaults from Cargo.toml.

Configuration structure:
    [package.metadata.ndk]
    platform = 21                               # API level
    targets = ["armeabi-v7a", "arm64-v8a"]      # default targets

    [package.metadata.ndk.release]
    targets = ["armeabi-v7a", "arm64-v8a"]      # used with --release

    [package.metadata.ndk.debug]
    targets = ["x86_64"]                        # used otherwise

Command line flags win over these values, these values win over defaults.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from cargo_ndk.utils.ndk.errors import NdkError
from cargo_ndk.utils.ndk.target import DEFAULT_TARGETS, Target

DEFAULT_PLATFORM = 21


@dataclass
class NdkConfig:
    platform: int = DEFAULT_PLATFORM
    targets: List[Target] = field(default_factory=lambda: list(DEFAULT_TARGETS))


def _parse_targets(values) -> List[Target]:
    if not isinstance(values, list):
        raise NdkError(f"[package.metadata.ndk] targets must be a list, got {values!r}")
    return [Target.parse(value) for value in values]


def ndk_config_from_dict(data: Dict[str, Any], is_release: bool) -> NdkConfig:
    ndk = data.get("package", {}).get("metadata", {}).get("ndk")
    if not ndk:
        return NdkConfig()

    platform = ndk.get("platform", DEFAULT_PLATFORM)
    if not isinstance(platform, int):
        raise NdkError(f"[package.metadata.ndk] platform must be an integer, got {platform!r}")

    targets = _parse_targets(ndk["targets"]) if "targets" in ndk else list(DEFAULT_TARGETS)
    profile = ndk.get("release" if is_release else "debug")
    if profile and "targets" in profile:
        targets = _parse_targets(profile["targets"])

    return NdkConfig(platform=platform, targets=targets)


def load_ndk_config(manifest_path, is_release: bool = False) -> NdkConfig:
    """
    Load ``[package.metadata.ndk]`` from a Cargo.toml.

    A missing manifest yields the defaults; cargo itself reports that error
    with better context once it runs.
    """
    if manifest_path is None or not os.path.isfile(manifest_path):
        return NdkConfig()
    # Must open in rb mode for tomllib
    with open(manifest_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise NdkError(f"Failed to parse {manifest_path}: {e}") from e
    return ndk_config_from_dict(data, is_release)
