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
Toolchain path resolution for NDK r23+.

All tools live in a single LLVM prebuilt directory:

    <ndk>/toolchains/llvm/prebuilt/<host-tag>/bin/aarch64-linux-android21-clang
    <ndk>/toolchains/llvm/prebuilt/<host-tag>/bin/llvm-ar
    <ndk>/toolchains/llvm/prebuilt/<host-tag>/sysroot/usr/include/<tool-triple>

Resolution is textual, nothing here checks that a path exists (except
``find_clang_builtins`` which has to glob the clang resource directory).
A missing tool shows up later as a spawn error naming the path.
"""

import glob
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# The clang driver scripts are named after the LLVM triple, which spells out
# the ARM sub-architecture, unlike the Rust triple.
_COMPILER_DRIVER_TRIPLES = {
    "arm-linux-androideabi": "armv7a-linux-androideabi",
    "armv7-linux-androideabi": "armv7a-linux-androideabi",
}

# sysroot directories and binutils-era tool prefixes use the GNU triple
_TOOL_TRIPLES = {
    "armv7-linux-androideabi": "arm-linux-androideabi",
}

# architecture component of libclang_rt.builtins-<arch>-android.a
_BUILTINS_ARCHS = {
    "armv7-linux-androideabi": "arm",
    "aarch64-linux-android": "aarch64",
    "i686-linux-android": "i686",
    "x86_64-linux-android": "x86_64",
}

LIBCXX_SHARED = "libc++_shared.so"


def compiler_driver_triple(triple: str) -> str:
    return _COMPILER_DRIVER_TRIPLES.get(triple, triple)


def tool_triple(triple: str) -> str:
    return _TOOL_TRIPLES.get(triple, triple)


def clang_target(triple: str, api_level: int) -> str:
    """The ``--target=`` value clang expects, e.g. ``aarch64-linux-android21``."""
    return f"{compiler_driver_triple(triple)}{api_level}"


def host_is_windows(host_tag: str) -> bool:
    return host_tag.startswith("windows")


def prebuilt_path(ndk_root, host_tag: str) -> Path:
    return Path(ndk_root, "toolchains", "llvm", "prebuilt", host_tag)


def bin_path(ndk_root, host_tag: str) -> Path:
    return prebuilt_path(ndk_root, host_tag) / "bin"


def compiler_path(ndk_root, host_tag: str, triple: str, api_level: int, is_cxx: bool = False) -> Path:
    postfix = "++" if is_cxx else ""
    ext = ".cmd" if host_is_windows(host_tag) else ""
    name = f"{clang_target(triple, api_level)}-clang{postfix}{ext}"
    return bin_path(ndk_root, host_tag) / name


def llvm_tool_path(ndk_root, host_tag: str, tool: str) -> Path:
    ext = ".exe" if host_is_windows(host_tag) else ""
    return bin_path(ndk_root, host_tag) / f"{tool}{ext}"


def archiver_path(ndk_root, host_tag: str) -> Path:
    return llvm_tool_path(ndk_root, host_tag, "llvm-ar")


def ranlib_path(ndk_root, host_tag: str) -> Path:
    return llvm_tool_path(ndk_root, host_tag, "llvm-ranlib")


def stripper_path(ndk_root, host_tag: str) -> Path:
    return llvm_tool_path(ndk_root, host_tag, "llvm-strip")


def sysroot_path(ndk_root, host_tag: str) -> Path:
    return prebuilt_path(ndk_root, host_tag) / "sysroot"


def sysroot_include_path(sysroot, triple: str) -> Path:
    return Path(sysroot, "usr", "include", tool_triple(triple))


def sysroot_libs_path(sysroot, triple: str) -> Path:
    return Path(sysroot, "usr", "lib", tool_triple(triple))


def cmake_toolchain_path(ndk_root) -> Path:
    return Path(ndk_root, "build", "cmake", "android.toolchain.cmake")


@dataclass(frozen=True)
class ResolvedPaths:
    clang: Path
    clangxx: Path
    ar: Path
    ranlib: Path
    strip: Path
    sysroot: Path
    sysroot_include: Path
    sysroot_libs: Path

    @property
    def libcxx_shared(self) -> Path:
        return self.sysroot_libs / LIBCXX_SHARED


def resolve_paths(ndk_root, host_tag: str, triple: str, api_level: int) -> ResolvedPaths:
    sysroot = sysroot_path(ndk_root, host_tag)
    return ResolvedPaths(
        clang=compiler_path(ndk_root, host_tag, triple, api_level),
        clangxx=compiler_path(ndk_root, host_tag, triple, api_level, is_cxx=True),
        ar=archiver_path(ndk_root, host_tag),
        ranlib=ranlib_path(ndk_root, host_tag),
        strip=stripper_path(ndk_root, host_tag),
        sysroot=sysroot,
        sysroot_include=sysroot_include_path(sysroot, triple),
        sysroot_libs=sysroot_libs_path(sysroot, triple),
    )


def find_clang_builtins(ndk_root, host_tag: str, triple: str) -> Optional[Path]:
    """
    Locate the clang builtins archive for a target.

    The archive sits in the versioned clang resource directory, e.g.
    ``lib/clang/17/lib/linux/libclang_rt.builtins-aarch64-android.a`` (older
    NDKs use ``lib64/clang/<version>``). The highest clang version wins.
    """
    arch = _BUILTINS_ARCHS.get(triple)
    if arch is None:
        return None
    name = f"libclang_rt.builtins-{arch}-android.a"
    prebuilt = str(prebuilt_path(ndk_root, host_tag))
    candidates = []
    for lib_dir in ("lib", "lib64"):
        candidates.extend(
            glob.glob(os.path.join(prebuilt, lib_dir, "clang", "*", "lib", "linux", name))
        )
    if not candidates:
        return None
    return Path(max(candidates, key=_clang_version_key))


def _clang_version_key(path: str):
    version = Path(path).parents[2].name
    return tuple(int(p) if p.isdigit() else 0 for p in version.split("."))
