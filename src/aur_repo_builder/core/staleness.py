"""リビルド要否の判定（staleness decision）."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from .artifacts import ArtifactRef
from .repository import RepositoryIndex
from .version import VersionComparator, VersionKey


class BuildAction(str, Enum):
    SKIP = "skip"
    BUILD = "build"


@dataclass(frozen=True)
class Decision:
    """判定結果.

    Attributes:
        action: SKIP または BUILD
        published: 判定に使った公開済みバージョン（未公開なら None）
        purge: ビルド前に削除すべき旧成果物（パッケージと署名を pkgname ごとに1件ずつ）
    """

    action: BuildAction
    published: VersionKey | None = None
    purge: tuple[ArtifactRef, ...] = ()

    @property
    def needs_build(self) -> bool:
        return self.action is BuildAction.BUILD


class StalenessDecider:
    """候補バージョンと公開済みバージョンを比較してビルド要否を決める.

    分割パッケージは同じ version/release を共有する前提のため、
    判定には members の先頭1件のみを代表として使う。

    Args:
        index: リポジトリの検索器
        comparator: バージョン文字列の比較器（None の場合はプロセス内実装）
    """

    def __init__(self, index: RepositoryIndex, comparator: VersionComparator | None = None) -> None:
        self.index = index
        self.comparator = comparator

    def decide(self, candidate: VersionKey) -> Decision:
        """候補のビルド要否と削除対象を判定する.

        Args:
            candidate: .SRCINFO から得た VersionKey（members 必須）

        Returns:
            判定結果

        Raises:
            ValueError: candidate.members が空の場合
            RepositoryConsistencyError: リポジトリの状態が矛盾している場合
            VersionComparisonError: バージョン比較に失敗した場合
        """
        if not candidate.members:
            raise ValueError(f"Candidate {candidate.name} has no members to build")

        representative = candidate.members[0]
        published = self.index.find_published(representative)
        if published is None:
            logger.info(f"{candidate.name}: {representative} is not published yet")
            return Decision(action=BuildAction.BUILD)

        if candidate.compare(published, self.comparator) <= 0:
            logger.info(
                f"{candidate.name}: candidate {candidate.full_version} is not newer than "
                f"published {published.full_version}"
            )
            return Decision(action=BuildAction.SKIP, published=published)

        purge: list[ArtifactRef] = []
        for member in candidate.members:
            package, signature = self.index.find_artifacts(member, published.version, published.release)
            purge.extend([package, signature])

        logger.info(
            f"{candidate.name}: {published.full_version} -> {candidate.full_version}, "
            f"{len(purge)} artifacts to purge"
        )
        return Decision(action=BuildAction.BUILD, published=published, purge=tuple(purge))
