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
Errors raised while resolving the NDK and composing the build environment.

Every error carries an optional ``hint``: a follow-up line the command layer
prints as a NOTE after the ERROR line.
"""

from typing import Optional


class NdkError(Exception):
    """Base class of all fatal cargo-ndk resolution errors (exit code 1)."""

    exit_code = 1

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class UnsupportedTargetError(NdkError):
    def __init__(self, value: str):
        super().__init__(
            f"Unsupported target: '{value}'",
            hint="Supported targets: armeabi-v7a, arm64-v8a, x86, x86_64 "
            "(or their Rust triples)",
        )
        self.value = value


class NdkNotFoundError(NdkError):
    def __init__(self):
        super().__init__(
            "Could not find any NDK.",
            hint="Set the environment ANDROID_NDK_HOME to your NDK installation's "
            "root directory,\nor install the NDK using Android Studio.",
        )


class NdkVersionError(NdkError):
    pass


class MissingRevisionError(NdkVersionError):
    def __init__(self, path):
        super().__init__(f"Could not find Pkg.Revision in {path}")
        self.path = path


class MalformedVersionError(NdkVersionError):
    def __init__(self, raw: str):
        super().__init__(f"Could not parse NDK version. Got: '{raw}'")
        self.raw = raw


class UnsupportedNdkVersionError(NdkVersionError):
    def __init__(self, version, minimum_major: int):
        super().__init__(
            f"NDK version {version} is too old, the minimum supported "
            f"major version is {minimum_major}",
            hint="Install an up-to-date NDK version.",
        )
        self.version = version
        self.minimum_major = minimum_major


class RustFlagsConflictError(NdkError):
    def __init__(self):
        super().__init__(
            "Both CARGO_ENCODED_RUSTFLAGS and RUSTFLAGS are set, "
            "refusing to guess which one cargo should use.",
            hint="Unset one of them and try again.",
        )


class ShimCreationError(NdkError):
    def __init__(self, path, cause: OSError):
        super().__init__(
            f"Failed to create libgcc.a linker script workaround at {path}: {cause}"
        )
        self.path = path
        self.cause = cause


class ToolSpawnError(NdkError):
    def __init__(self, tool, cause: OSError):
        super().__init__(f"Failed to spawn {tool}: {cause}")
        self.tool = tool
        self.cause = cause


class CargoMetadataError(NdkError):
    def __init__(self, message: str):
        super().__init__(
            "Failed to load Cargo.toml in current directory.\n" + message
        )


class ArtifactError(NdkError):
    pass
