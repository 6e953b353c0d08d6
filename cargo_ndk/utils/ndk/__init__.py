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

"""NDK toolchain resolution and environment composition."""

from .env import EnvironmentMap, build_env
from .errors import NdkError
from .paths import ResolvedPaths, resolve_paths
from .rustflags import RustFlags
from .target import Target
from .version import NdkVersion, ensure_supported, parse_version

__all__ = [
    'EnvironmentMap',
    'NdkError',
    'NdkVersion',
    'ResolvedPaths',
    'RustFlags',
    'Target',
    'build_env',
    'ensure_supported',
    'parse_version',
    'resolve_paths',
]
