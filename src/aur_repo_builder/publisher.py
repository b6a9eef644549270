"""ビルド成果物のリポジトリへの配置とデータベース更新."""

from __future__ import annotations

import shutil
from pathlib import Path

from loguru import logger

from aur_repo_builder.core.artifacts import ArtifactKind, ArtifactNaming, ArtifactRef
from aur_repo_builder.core.commands import RepoAdd
from aur_repo_builder.core.version import VersionKey


def copy_member_artifacts(
    build_dir: Path,
    repo_dir: Path,
    key: VersionKey,
    member: str,
    naming: ArtifactNaming,
) -> Path:
    """pkgname 1件分のパッケージと署名をリポジトリへコピーする.

    Args:
        build_dir: makepkg を実行した定義ディレクトリ
        repo_dir: リポジトリディレクトリ
        key: ビルドした VersionKey（version/release の照合に使う）
        member: pkgname
        naming: 成果物の命名規則

    Returns:
        コピー先のパッケージファイルパス

    Raises:
        RepositoryConsistencyError: パッケージまたは署名がちょうど1件でない場合
    """
    package = naming.find_one(build_dir, member, key.version, key.release, ArtifactKind.PACKAGE)
    signature = naming.find_one(build_dir, member, key.version, key.release, ArtifactKind.SIGNATURE)

    dest_package = _copy(package, repo_dir)
    _copy(signature, repo_dir)
    return dest_package


def _copy(ref: ArtifactRef, repo_dir: Path) -> Path:
    dest = repo_dir / ref.filename
    shutil.copy2(ref.path, dest)
    logger.info(f"Copied {ref.filename} -> {repo_dir}")
    return dest


def update_index(repo_add: RepoAdd, database: Path, packages: list[Path]) -> None:
    """コピー済みパッケージを1件ずつデータベースへ追加する.

    失敗時にロールバックは行わない（再実行で回復する）。
    """
    for package in packages:
        logger.info(f"Adding {package.name} to {database.name}")
        repo_add.add(database, package)
