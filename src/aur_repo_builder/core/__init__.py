"""リビルド判定のコア処理群.

- バージョン比較（VersionKey / vercmp）
- .SRCINFO 解析
- リポジトリ走査と成果物の命名規則
- ビルド要否判定（削除対象の算出）
"""

from .artifacts import ArtifactKind, ArtifactNaming, ArtifactRef
from .commands import Git, Makepkg, RepoAdd, SubprocessRunner, VercmpCommand
from .exceptions import (
    AurBuildError,
    ExternalCommandError,
    RepositoryConsistencyError,
    SrcinfoParseError,
    VersionComparisonError,
)
from .repository import RepositoryIndex
from .srcinfo import parse_srcinfo
from .staleness import BuildAction, Decision, StalenessDecider
from .vercmp import AlpmVersionComparator, vercmp
from .version import VersionComparator, VersionKey

__all__ = [
    "AlpmVersionComparator",
    "ArtifactKind",
    "ArtifactNaming",
    "ArtifactRef",
    "AurBuildError",
    "BuildAction",
    "Decision",
    "ExternalCommandError",
    "Git",
    "Makepkg",
    "RepoAdd",
    "RepositoryConsistencyError",
    "RepositoryIndex",
    "SrcinfoParseError",
    "StalenessDecider",
    "SubprocessRunner",
    "VercmpCommand",
    "VersionComparator",
    "VersionComparisonError",
    "VersionKey",
    "parse_srcinfo",
    "vercmp",
]
