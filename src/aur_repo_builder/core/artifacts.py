"""パッケージ成果物（*.pkg.tar.zst / *.sig）の命名規則と検索.

ファイル名規則: `<pkgname>-<pkgver>-<pkgrel>-<arch><ext>`（署名は `<...><ext>.sig`）。
pkgver/pkgrel/arch はハイフンを含まないため、末尾から3つのハイフンで分割すれば
pkgname にハイフンが含まれていても一意に解析できる。
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .exceptions import RepositoryConsistencyError

DEFAULT_PACKAGE_EXT = ".pkg.tar.zst"
DEFAULT_ARCHITECTURES = ("x86_64", "any")
SIGNATURE_EXT = ".sig"


class ArtifactKind(str, Enum):
    """成果物の種類."""

    PACKAGE = "package"
    SIGNATURE = "signature"


@dataclass(frozen=True)
class ArtifactRef:
    """ファイルシステム上の成果物1件."""

    name: str
    version: str
    release: int
    arch: str
    kind: ArtifactKind
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ParsedFilename:
    name: str
    version: str
    release: str
    arch: str


class ArtifactNaming:
    """成果物ファイル名の生成・解析・検索を行う.

    Args:
        package_ext: パッケージ拡張子（例: ".pkg.tar.zst"）
        architectures: 許可するアーキテクチャ（例: ("x86_64", "any")）
    """

    def __init__(
        self,
        package_ext: str = DEFAULT_PACKAGE_EXT,
        architectures: Sequence[str] = DEFAULT_ARCHITECTURES,
    ) -> None:
        if not package_ext.startswith("."):
            raise ValueError(f"package_ext must start with '.': {package_ext!r}")
        if not architectures:
            raise ValueError("architectures must not be empty")
        self.package_ext = package_ext
        self.architectures = tuple(architectures)
        self._filename_re = re.compile(
            r"^(?P<name>.+)-(?P<version>[^-/]+)-(?P<release>[^-/]+)-(?P<arch>[^-/]+)"
            + re.escape(package_ext)
            + "$"
        )

    def suffix(self, kind: ArtifactKind) -> str:
        if kind is ArtifactKind.SIGNATURE:
            return self.package_ext + SIGNATURE_EXT
        return self.package_ext

    def filename(self, name: str, version: str, release: int, arch: str, kind: ArtifactKind) -> str:
        return f"{name}-{version}-{release}-{arch}{self.suffix(kind)}"

    def parse(self, filename: str) -> ParsedFilename | None:
        """パッケージファイル名を分解する（規則に合わなければ None）."""
        m = self._filename_re.match(filename)
        if not m:
            return None
        return ParsedFilename(
            name=m.group("name"),
            version=m.group("version"),
            release=m.group("release"),
            arch=m.group("arch"),
        )

    def to_ref(self, path: Path, kind: ArtifactKind = ArtifactKind.PACKAGE) -> ArtifactRef:
        """規則に完全に従うファイルを ArtifactRef に変換する.

        Raises:
            RepositoryConsistencyError: ファイル名が規則に従わない場合
        """
        filename = path.name
        if kind is ArtifactKind.SIGNATURE:
            if not filename.endswith(SIGNATURE_EXT):
                raise RepositoryConsistencyError("Not a signature file", matches=[filename])
            filename = filename[: -len(SIGNATURE_EXT)]

        parsed = self.parse(filename)
        if parsed is None:
            raise RepositoryConsistencyError("Artifact filename does not match the naming pattern", matches=[path.name])
        if not parsed.release.isdigit():
            raise RepositoryConsistencyError(
                "Artifact filename has a non-integer pkgrel", name=parsed.name, matches=[path.name]
            )
        if parsed.arch not in self.architectures:
            raise RepositoryConsistencyError(
                f"Artifact architecture is not one of {self.architectures}", name=parsed.name, matches=[path.name]
            )
        return ArtifactRef(
            name=parsed.name,
            version=parsed.version,
            release=int(parsed.release),
            arch=parsed.arch,
            kind=kind,
            path=path,
        )

    def find(
        self,
        directory: Path,
        name: str,
        version: str,
        release: int,
        kind: ArtifactKind,
    ) -> list[ArtifactRef]:
        """(name, version, release) が完全一致する成果物を許可アーキテクチャから探す."""
        found: list[ArtifactRef] = []
        for arch in self.architectures:
            path = directory / self.filename(name, version, release, arch, kind)
            if path.is_file():
                found.append(
                    ArtifactRef(name=name, version=version, release=release, arch=arch, kind=kind, path=path)
                )
        return found

    def find_one(
        self,
        directory: Path,
        name: str,
        version: str,
        release: int,
        kind: ArtifactKind,
    ) -> ArtifactRef:
        """ちょうど1件の成果物を返す.

        Raises:
            RepositoryConsistencyError: 0件または複数件の場合
        """
        found = self.find(directory, name, version, release, kind)
        if len(found) != 1:
            label = self.filename(name, version, release, "*", kind)
            raise RepositoryConsistencyError(
                f"Expected exactly one {kind.value} {label} in {directory}, found {len(found)}",
                name=name,
                matches=[ref.filename for ref in found],
            )
        return found[0]
