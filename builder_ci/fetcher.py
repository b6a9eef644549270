"""AUR からの定義（PKGBUILD リポジトリ）取得."""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from aur_repo_builder.core.commands import Git
from builder_ci.config import AUR_URL_TEMPLATE, PackageSource


def fetch_aur_package(
    source: PackageSource,
    dest: Path,
    force: bool = False,
    git: Git | None = None,
    url_template: str = AUR_URL_TEMPLATE,
) -> dict:
    """AUR の git リポジトリを clone（既存なら更新）して commit hash を記録.

    Args:
        source: パッケージ定義
        dest: 保存先ディレクトリ
        force: 既存ディレクトリを削除して再取得するか
        git: git 呼び出し
        url_template: clone URL のテンプレート（source.url が優先）

    Returns:
        取得結果のメタデータ辞書
    """
    git = git or Git()
    url = source.clone_url(url_template)

    logger.info(f"Fetching AUR package: {source.name} from {url}")

    # 既存ディレクトリの処理
    if dest.exists():
        if force:
            logger.warning(f"Removing existing directory: {dest}")
            shutil.rmtree(dest)
        elif not (dest / ".git").exists():
            logger.warning(f"Existing path is not a git repo, recreating: {dest}")
            shutil.rmtree(dest)
        else:
            logger.info(f"Updating existing repo: {dest}")
            git.run("fetch", "--depth=1", "origin", cwd=dest)
            git.run("reset", "--hard", "FETCH_HEAD", cwd=dest)
            # 前回の成果物が残ると照合が曖昧になるため作業ツリーを初期化
            git.run("clean", "-ffdx", cwd=dest)
            commit_hash = git.run("rev-parse", "HEAD", cwd=dest, capture=True)

            return {
                "id": source.name,
                "url": url,
                "commit_hash": commit_hash,
                "fetched_at": datetime.now(timezone.utc).isoformat(),
                "updated": True,
            }

    # git clone
    dest.parent.mkdir(parents=True, exist_ok=True)
    git.run("clone", "--depth=1", url, str(dest))

    commit_hash = git.run("rev-parse", "HEAD", cwd=dest, capture=True)
    logger.info(f"Cloned {source.name} at commit {commit_hash[:8]}")

    return {
        "id": source.name,
        "url": url,
        "commit_hash": commit_hash,
        "fetched_at": datetime.now(timezone.utc).isoformat(),
        "updated": False,
    }


def discover_definitions(build_root: Path) -> list[PackageSource]:
    """ビルドルート直下の PKGBUILD を持つディレクトリを定義として列挙する（名前順）."""
    if not build_root.is_dir():
        logger.warning(f"Build root does not exist: {build_root}")
        return []

    sources = [
        PackageSource(name=path.name)
        for path in sorted(build_root.iterdir())
        if path.is_dir() and (path / "PKGBUILD").is_file()
    ]
    logger.info(f"Discovered {len(sources)} definitions under {build_root}")
    return sources
