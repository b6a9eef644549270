"""パッケージビルダー（オーケストレーター）.

1つの定義ディレクトリについて、以下を厳密に順番に実行する。

    ExtractMetadata → Decide → (Skip: 終了)
                             | Purge → Invoke → PublishEach → UpdateIndex → 終了

repo-add は追記型でエントリを置き換えないため、旧バージョンの成果物は
ビルド前に明示的に削除する（purge-before-build）。
途中で失敗しても既に行った削除/コピーは巻き戻さない。再実行時の判定で回復する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from loguru import logger

from aur_repo_builder.core.artifacts import ArtifactNaming
from aur_repo_builder.core.commands import Makepkg, RepoAdd
from aur_repo_builder.core.repository import RepositoryIndex
from aur_repo_builder.core.srcinfo import parse_srcinfo
from aur_repo_builder.core.staleness import Decision, StalenessDecider
from aur_repo_builder.core.version import VersionComparator, VersionKey
from aur_repo_builder.publisher import copy_member_artifacts, update_index


class BuildOutcome(str, Enum):
    BUILT = "built"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BuildResult:
    outcome: BuildOutcome
    key: VersionKey
    decision: Decision
    published: tuple[Path, ...] = ()


class BuildOrchestrator:
    """定義ディレクトリ単位でビルド要否判定→ビルド→公開を行う.

    Args:
        repo_dir: リポジトリディレクトリ
        repo_db: リポジトリデータベースのファイル名（例: "custom.db.tar.zst"）
        makepkg: makepkg 呼び出し
        repo_add: repo-add 呼び出し
        comparator: バージョン比較器（None の場合はプロセス内実装）
        naming: 成果物の命名規則
    """

    def __init__(
        self,
        repo_dir: Path,
        repo_db: str,
        makepkg: Makepkg | None = None,
        repo_add: RepoAdd | None = None,
        comparator: VersionComparator | None = None,
        naming: ArtifactNaming | None = None,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.database = self.repo_dir / repo_db
        self.makepkg = makepkg or Makepkg()
        self.repo_add = repo_add or RepoAdd()
        self.naming = naming or ArtifactNaming()
        self.index = RepositoryIndex(self.repo_dir, self.naming)
        self.decider = StalenessDecider(self.index, comparator)

    def extract_metadata(self, definition_dir: Path) -> VersionKey:
        srcinfo = self.makepkg.print_srcinfo(definition_dir)
        return parse_srcinfo(srcinfo, source=str(definition_dir))

    def purge(self, decision: Decision) -> None:
        # 既に存在しない場合は FileNotFoundError（走査後にリポジトリが変わった）
        for ref in decision.purge:
            logger.info(f"Removing {ref.filename}")
            ref.path.unlink()

    def publish(self, definition_dir: Path, key: VersionKey) -> list[Path]:
        return [
            copy_member_artifacts(definition_dir, self.repo_dir, key, member, self.naming)
            for member in key.members
        ]

    def process(self, definition_dir: Path, install: bool = False) -> BuildResult:
        """1定義を処理する.

        Args:
            definition_dir: PKGBUILD のあるディレクトリ
            install: ビルド後にインストールするか（makepkg -i）

        Returns:
            処理結果

        Raises:
            AurBuildError: 解析/整合性/外部コマンドのいずれかで失敗した場合
            OSError: 削除・コピーに失敗した場合
        """
        definition_dir = Path(definition_dir)

        key = self.extract_metadata(definition_dir)
        decision = self.decider.decide(key)

        if not decision.needs_build:
            logger.info(f"Skipping {key.name}")
            return BuildResult(outcome=BuildOutcome.SKIPPED, key=key, decision=decision)

        logger.info(f"Building {key.name} {key.full_version} ({', '.join(key.members)})")
        self.purge(decision)
        self.makepkg.build(definition_dir, install=install)
        packages = self.publish(definition_dir, key)
        update_index(self.repo_add, self.database, packages)

        logger.info(f"Published {key.name} {key.full_version}")
        return BuildResult(
            outcome=BuildOutcome.BUILT,
            key=key,
            decision=decision,
            published=tuple(packages),
        )
