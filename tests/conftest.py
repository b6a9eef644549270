"""テスト共通のフィクスチャ.

外部ツール（makepkg / vercmp / repo-add / git）は FakeRunner で置き換える。
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from aur_repo_builder.core.artifacts import ArtifactKind, ArtifactNaming
from aur_repo_builder.core.srcinfo import parse_srcinfo
from aur_repo_builder.core.vercmp import vercmp


def make_srcinfo(
    pkgbase: str,
    pkgver: str,
    pkgrel: str | int,
    members: Sequence[str] | None = None,
    epoch: str | None = None,
) -> str:
    members = list(members) if members is not None else [pkgbase]
    lines = [
        f"pkgbase = {pkgbase}",
        f"\tpkgdesc = {pkgbase} test package",
        f"\tpkgver = {pkgver}",
        f"\tpkgrel = {pkgrel}",
    ]
    if epoch is not None:
        lines.append(f"\tepoch = {epoch}")
    lines += ["\turl = https://example.com", "\tarch = x86_64", "\tlicense = MIT", ""]
    for member in members:
        lines += [f"pkgname = {member}", ""]
    return "\n".join(lines)


class FakeRunner:
    """CommandRunner の偽実装.

    Attributes:
        calls: 実行された (args, cwd) の記録
        srcinfo: 定義ディレクトリ名 -> .SRCINFO テキスト
        returncodes: 実行ファイル名 -> 強制する終了ステータス
        build_arch: makepkg が生成する成果物のアーキテクチャ
        sign: makepkg が署名ファイルも生成するか
        build_returncode: makepkg のビルド時の終了ステータス
        failing_builds: ビルドを失敗させる定義ディレクトリ名
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self.srcinfo: dict[str, str] = {}
        self.returncodes: dict[str, int] = {}
        self.build_arch = "x86_64"
        self.sign = True
        self.build_returncode = 0
        self.failing_builds: set[str] = set()
        self.naming = ArtifactNaming()

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        args = list(args)
        self.calls.append((args, cwd))
        forced = self.returncodes.get(args[0])
        if forced:
            return subprocess.CompletedProcess(args, forced, "", f"{args[0]}: forced failure")
        handler = getattr(self, "_" + args[0].replace("-", "_"))
        return handler(args, cwd)

    def commands(self, executable: str) -> list[list[str]]:
        return [args for args, _ in self.calls if args[0] == executable]

    def _makepkg(self, args: list[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
        assert cwd is not None
        text = self.srcinfo.get(cwd.name, "")
        if "--printsrcinfo" in args:
            return subprocess.CompletedProcess(args, 0, text, "")

        if self.build_returncode or cwd.name in self.failing_builds:
            return subprocess.CompletedProcess(args, self.build_returncode or 1, "", "==> ERROR: build failed")

        key = parse_srcinfo(text, source=str(cwd))
        for member in key.members:
            kinds = [ArtifactKind.PACKAGE, ArtifactKind.SIGNATURE] if self.sign else [ArtifactKind.PACKAGE]
            for kind in kinds:
                filename = self.naming.filename(member, key.version, key.release, self.build_arch, kind)
                (cwd / filename).write_bytes(b"built")
        return subprocess.CompletedProcess(args, 0, None, None)

    def _vercmp(self, args: list[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(args, 0, f"{vercmp(args[1], args[2])}\n", "")

    def _repo_add(self, args: list[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(args, 0, None, None)

    def _git(self, args: list[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
        if args[1] == "clone":
            dest = Path(args[-1])
            (dest / ".git").mkdir(parents=True)
            (dest / "PKGBUILD").write_text("# fake\n", encoding="utf-8")
        if args[1] == "rev-parse":
            return subprocess.CompletedProcess(args, 0, "0123456789abcdef0123456789abcdef01234567\n", "")
        return subprocess.CompletedProcess(args, 0, "", "")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    path = tmp_path / "build"
    path.mkdir()
    return path


@pytest.fixture
def srcinfo() -> Callable[..., str]:
    return make_srcinfo


@pytest.fixture
def make_artifact() -> Callable[..., Path]:
    """リポジトリ/ビルドディレクトリに成果物ファイルを作る関数を返す."""
    naming = ArtifactNaming()

    def _make(
        directory: Path,
        name: str,
        version: str,
        release: int,
        arch: str = "x86_64",
        signature: bool = True,
    ) -> Path:
        package = directory / naming.filename(name, version, release, arch, ArtifactKind.PACKAGE)
        package.write_bytes(b"pkg")
        if signature:
            (directory / naming.filename(name, version, release, arch, ArtifactKind.SIGNATURE)).write_bytes(b"sig")
        return package

    return _make


@pytest.fixture
def make_definition(build_root: Path, fake_runner: FakeRunner) -> Callable[..., Path]:
    """PKGBUILD ディレクトリを作り、FakeRunner に .SRCINFO を登録する関数を返す."""

    def _make(
        pkgbase: str,
        pkgver: str,
        pkgrel: str | int,
        members: Sequence[str] | None = None,
        epoch: str | None = None,
    ) -> Path:
        definition_dir = build_root / pkgbase
        definition_dir.mkdir(exist_ok=True)
        (definition_dir / "PKGBUILD").write_text("# fake\n", encoding="utf-8")
        fake_runner.srcinfo[pkgbase] = make_srcinfo(pkgbase, pkgver, pkgrel, members, epoch)
        return definition_dir

    return _make
