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

"""Cargo invocation and cargo output parsing."""

from .config import NdkConfig, load_ndk_config
from .invoke import build_cargo_args, get_cargo_bin, invoke
from .metadata import Artifact, CargoMetadata, load_metadata, parse_message

__all__ = [
    'Artifact',
    'CargoMetadata',
    'NdkConfig',
    'build_cargo_args',
    'get_cargo_bin',
    'invoke',
    'load_metadata',
    'load_ndk_config',
    'parse_message',
]
