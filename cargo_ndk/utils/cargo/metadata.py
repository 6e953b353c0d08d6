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
Readers for cargo's JSON output: ``cargo metadata`` and the
``compiler-artifact`` messages of ``--message-format=json``.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from cargo_ndk.utils.cmd.cmd_util import exec_command
from cargo_ndk.utils.ndk.errors import CargoMetadataError


@dataclass
class CargoMetadata:
    target_directory: Path
    workspace_root: Path
    packages: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CargoMetadata":
        return cls(
            target_directory=Path(data["target_directory"]),
            workspace_root=Path(data["workspace_root"]),
            packages=data.get("packages", []),
        )

    def package_manifest(self, name: str) -> Optional[Path]:
        for package in self.packages:
            if package.get("name") == name:
                return Path(package["manifest_path"])
        return None


def load_metadata(cargo_bin: str, manifest_path=None, cwd=None) -> CargoMetadata:
    """
    Run ``cargo metadata --no-deps`` and parse the result.

    Raises:
        CargoMetadataError: cargo failed or printed something unexpected
    """
    command = [cargo_bin, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        command += ["--manifest-path", os.fspath(manifest_path)]
    code, stdout, stderr = exec_command(command, cwd=cwd)
    if code != 0:
        raise CargoMetadataError(stderr.strip())
    try:
        return CargoMetadata.from_json(json.loads(stdout))
    except (ValueError, KeyError) as e:
        raise CargoMetadataError(f"unexpected cargo metadata output: {e}") from e


@dataclass
class Artifact:
    package_id: str
    crate_types: List[str]
    filenames: List[str]
    executable: Optional[str] = None
    manifest_path: Optional[str] = None
    src_path: Optional[str] = None

    @property
    def is_cdylib(self) -> bool:
        return "cdylib" in self.crate_types

    def shared_library(self) -> Optional[Path]:
        for name in self.filenames:
            if name.endswith(".so"):
                return Path(name)
        return None


def parse_message(line: str) -> Optional[Artifact]:
    """
    Parse one line of cargo's JSON message stream.

    Returns an Artifact for ``compiler-artifact`` messages and None for
    everything else, including lines that are not JSON at all.
    """
    if not line.startswith("{"):
        return None
    try:
        message = json.loads(line)
    except ValueError:
        return None
    if not isinstance(message, dict) or message.get("reason") != "compiler-artifact":
        return None
    target = message.get("target") or {}
    return Artifact(
        package_id=message.get("package_id", ""),
        crate_types=list(target.get("crate_types", [])),
        filenames=list(message.get("filenames", [])),
        executable=message.get("executable"),
        manifest_path=message.get("manifest_path"),
        src_path=target.get("src_path"),
    )
