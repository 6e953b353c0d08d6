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
Environment composition for one Android target.

``build_env`` computes every variable cargo (and the cc / bindgen crates it
runs in build scripts) needs to cross-compile for a target, and returns them
as an EnvironmentMap. Nothing here touches ``os.environ``: the inherited
environment is only read, and the result is handed to the child process.

Strategy: cargo's linker for the target is the versioned clang driver
(``aarch64-linux-android21-clang``), and C/C++ compiled by build scripts
additionally receives ``--target=<triple><api>`` through
``CFLAGS_<triple>`` / ``CXXFLAGS_<triple>``. No wrapper process sits
between cargo and clang.

``CC``, ``CXX``, ``AR`` and ``RANLIB`` set by the user (looked up like the
cc crate does) take precedence over the NDK tools. A user who points
``CC_<triple>`` at the plain ``clang`` binary (sidestepping the quoting bug
of the NDK ``.cmd`` wrappers on Windows, android/ndk#1856) still compiles
and links for the right target, as the ``--target`` flag also reaches the
linker through rustflags.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from cargo_ndk.utils.ndk.errors import NdkError, ShimCreationError
from cargo_ndk.utils.ndk.paths import (
    ResolvedPaths,
    clang_target,
    cmake_toolchain_path,
    find_clang_builtins,
    host_is_windows,
    resolve_paths,
)
from cargo_ndk.utils.ndk.rustflags import RustFlags
from cargo_ndk.utils.ndk.target import Target

LIBGCC_WORKAROUND_DIR = ("cargo-ndk", "libgcc-workaround")
LIBGCC_WORKAROUND_FILE = "libgcc.a"
LIBGCC_WORKAROUND_SCRIPT = "INPUT(-lunwind)"


class EnvironmentMap(dict):
    """
    Insertion ordered mapping of variable name to string value.

    A key may only be set once: two writers for one key would mean one of
    them is silently lost.
    """

    def __setitem__(self, key, value):
        if key in self:
            raise ValueError(f"environment variable {key} is already set")
        super().__setitem__(key, os.fspath(value) if isinstance(value, Path) else str(value))

    def update(self, *args, **kwargs):
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def setdefault(self, key, default=None):
        if key not in self:
            self[key] = default
        return self[key]


def cargo_env_target_cfg(triple: str, key: str) -> str:
    """``CARGO_TARGET_AARCH64_LINUX_ANDROID_LINKER`` style names."""
    return f"CARGO_TARGET_{triple.replace('-', '_')}_{key}".upper()


def bindgen_clang_args_key(triple: str) -> str:
    return f"BINDGEN_EXTRA_CLANG_ARGS_{triple.replace('-', '_')}"


def inherited_target_var(environ: Mapping[str, str], var: str, triple: str) -> Optional[str]:
    """
    Look up a compiler variable the way the cc crate does, most specific
    first: ``<VAR>_<triple>``, ``<VAR>_<triple_underscored>``, ``TARGET_<VAR>``,
    ``<VAR>``.
    """
    for key in (
        f"{var}_{triple}",
        f"{var}_{triple.replace('-', '_')}",
        f"TARGET_{var}",
        var,
    ):
        value = environ.get(key)
        if value is not None:
            return value
    return None


def create_libgcc_linker_script_workaround(target_dir) -> Path:
    """
    Write ``<target_dir>/cargo-ndk/libgcc-workaround/libgcc.a``.

    The file is a linker script redirecting ``-lgcc`` to libunwind. It is
    left alone when it already holds the expected content, and otherwise
    written to a temporary name first and renamed into place so concurrent
    builds never observe a partial file.
    """
    workaround_dir = Path(target_dir, *LIBGCC_WORKAROUND_DIR)
    workaround_file = workaround_dir / LIBGCC_WORKAROUND_FILE
    try:
        workaround_dir.mkdir(parents=True, exist_ok=True)
        if workaround_file.is_file() and workaround_file.read_text() == LIBGCC_WORKAROUND_SCRIPT:
            return workaround_dir
        tmp_file = workaround_dir / f".{LIBGCC_WORKAROUND_FILE}.{os.getpid()}.tmp"
        tmp_file.write_text(LIBGCC_WORKAROUND_SCRIPT)
        os.replace(tmp_file, workaround_file)
    except OSError as e:
        raise ShimCreationError(workaround_file, e) from e
    return workaround_dir


def build_env(
    triple: str,
    ndk_root,
    host_tag: str,
    api_level: int,
    link_compat_shim: bool,
    generate_bindings: bool,
    target_dir,
    environ: Optional[Mapping[str, str]] = None,
    link_builtins: bool = False,
    output_dir=None,
) -> EnvironmentMap:
    """
    Compose the environment for building ``triple`` with the given NDK.

    Args:
        triple: Rust target triple, e.g. ``aarch64-linux-android``
        ndk_root: NDK installation directory
        host_tag: prebuilt directory name, e.g. ``linux-x86_64``
        api_level: minimum Android API level
        link_compat_shim: redirect libgcc to libunwind (NDK r23+)
        generate_bindings: export sysroot arguments for bindgen
        target_dir: cargo target directory, home of the libgcc shim
        environ: inherited environment, defaults to ``os.environ``; read only
        link_builtins: link the clang builtins archive explicitly
        output_dir: jniLibs output directory, exported for build scripts

    Returns:
        EnvironmentMap: variables to set on top of the inherited environment

    Raises:
        NdkError: composition failed; nothing should be launched
    """
    if environ is None:
        environ = os.environ
    target = Target.parse(triple)
    paths = resolve_paths(ndk_root, host_tag, triple, api_level)
    clang_target_flag = f"--target={clang_target(triple, api_level)}"

    env = EnvironmentMap()

    # user overrides win, the NDK toolchain fills in the rest
    tools = {}
    for var, default in (
        ("CC", paths.clang),
        ("CXX", paths.clangxx),
        ("AR", paths.ar),
        ("RANLIB", paths.ranlib),
    ):
        tools[var] = inherited_target_var(environ, var, triple) or os.fspath(default)
        env[f"{var}_{triple}"] = tools[var]
    for var in ("CFLAGS", "CXXFLAGS"):
        inherited = inherited_target_var(environ, var, triple)
        env[f"{var}_{triple}"] = (
            f"{inherited} {clang_target_flag}" if inherited else clang_target_flag
        )

    env[cargo_env_target_cfg(triple, "ar")] = tools["AR"]
    env[cargo_env_target_cfg(triple, "linker")] = tools["CC"]

    # read before anything is written to disk: a conflict aborts cleanly
    rustflags = RustFlags.from_env(environ)
    rustflags_changed = False

    # an overridden compiler may be a plain clang that only the flag targets
    if tools["CC"] != os.fspath(paths.clang):
        rustflags.append(f"-Clink-arg={clang_target_flag}")
        rustflags_changed = True

    if link_builtins:
        builtins = find_clang_builtins(ndk_root, host_tag, triple)
        if builtins is None:
            raise NdkError(
                f"Could not find the clang builtins library for {triple} in {ndk_root}"
            )
        rustflags.append(f"-Clink-arg={builtins}")
        rustflags_changed = True

    # NDK r23 no longer ships libgcc, but the std shipped by rustup still
    # asks for it. The linker script below redirects it to libunwind. It goes
    # through rustflags rather than `cargo rustc` so every cdylib in the
    # dependency graph gets it.
    if link_compat_shim:
        libdir = create_libgcc_linker_script_workaround(target_dir)
        rustflags.append(f"-L{libdir}")
        rustflags_changed = True

    if rustflags_changed:
        key, value = rustflags.as_env_var()
        env[key] = value

    if generate_bindings:
        bindgen_args = f"--sysroot={paths.sysroot} -I{paths.sysroot_include}"
        if host_is_windows(host_tag):
            bindgen_args = bindgen_args.replace("\\", "/")
        env[bindgen_clang_args_key(triple)] = bindgen_args

    _add_informational_vars(env, target, ndk_root, api_level, paths, output_dir)

    return env


def _add_informational_vars(env, target, ndk_root, api_level, paths: ResolvedPaths, output_dir):
    # consumed by build scripts (cmake-rs, custom build.rs) rather than cargo
    env["CARGO_NDK_ANDROID_TARGET"] = target.display
    env["ANDROID_PLATFORM"] = api_level
    env["ANDROID_ABI"] = target.display
    env["CARGO_NDK_CMAKE_TOOLCHAIN_PATH"] = cmake_toolchain_path(ndk_root)
    env["CARGO_NDK_SYSROOT_PATH"] = paths.sysroot
    env["CARGO_NDK_SYSROOT_TARGET"] = target.tool_triple
    env["CARGO_NDK_SYSROOT_LIBS_PATH"] = paths.sysroot_libs
    if output_dir is not None:
        env["CARGO_NDK_OUTPUT_PATH"] = output_dir
