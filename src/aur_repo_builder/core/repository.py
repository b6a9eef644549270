"""リポジトリディレクトリの走査（公開済み成果物の検出）.

「何が公開済みか」の唯一の情報源はディレクトリ上のファイル名である。
キャッシュは持たず、呼び出しごとにファイルシステムを読み直す。
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .artifacts import SIGNATURE_EXT, ArtifactKind, ArtifactNaming, ArtifactRef
from .exceptions import RepositoryConsistencyError
from .version import VersionKey


class RepositoryIndex:
    """pacman リポジトリディレクトリ上の公開済み成果物を検索する.

    Args:
        repo_dir: リポジトリディレクトリ
        naming: 成果物の命名規則
    """

    def __init__(self, repo_dir: Path, naming: ArtifactNaming | None = None) -> None:
        self.repo_dir = Path(repo_dir)
        self.naming = naming or ArtifactNaming()

    def _candidates(self, name: str) -> list[Path]:
        pattern = f"{name}-*{self.naming.package_ext}"
        return sorted(p for p in self.repo_dir.glob(pattern) if p.is_file())

    def find_published(self, name: str) -> VersionKey | None:
        """pkgname の公開済みバージョンを返す.

        Args:
            name: pkgname

        Returns:
            公開済みなら VersionKey（members は空）、未公開なら None

        Raises:
            RepositoryConsistencyError: 同名のパッケージが複数ある、
                またはファイル名が命名規則に従わない場合
        """
        matches: list[ArtifactRef] = []
        for path in self._candidates(name):
            parsed = self.naming.parse(path.name)
            # foo を探すときに foo-utils-* を拾わない
            if parsed is not None and parsed.name != name:
                continue
            matches.append(self.naming.to_ref(path, ArtifactKind.PACKAGE))

        if not matches:
            logger.debug(f"No published package for {name} in {self.repo_dir}")
            return None
        if len(matches) > 1:
            raise RepositoryConsistencyError(
                f"Too many published packages for {name} in {self.repo_dir}",
                name=name,
                matches=[ref.filename for ref in matches],
            )

        ref = matches[0]
        logger.debug(f"Published {name}: {ref.version}-{ref.release} ({ref.filename})")
        return VersionKey(name=name, version=ref.version, release=ref.release)

    def find_artifacts(self, name: str, version: str, release: int) -> tuple[ArtifactRef, ArtifactRef]:
        """公開済みのパッケージと署名をちょうど1件ずつ返す.

        Raises:
            RepositoryConsistencyError: どちらかが0件または複数件の場合
        """
        package = self.naming.find_one(self.repo_dir, name, version, release, ArtifactKind.PACKAGE)
        signature = self.naming.find_one(self.repo_dir, name, version, release, ArtifactKind.SIGNATURE)
        return package, signature

    def scan(self) -> list[ArtifactRef]:
        """命名規則に従う全成果物（パッケージ+署名）を列挙する.

        規則に従わないファイルは警告してスキップする（レポート用途のため）。
        """
        refs: list[ArtifactRef] = []
        sig_suffix = self.naming.package_ext + SIGNATURE_EXT
        for path in sorted(self.repo_dir.iterdir()):
            if not path.is_file():
                continue
            if path.name.endswith(sig_suffix):
                kind = ArtifactKind.SIGNATURE
            elif path.name.endswith(self.naming.package_ext):
                kind = ArtifactKind.PACKAGE
            else:
                continue
            try:
                refs.append(self.naming.to_ref(path, kind))
            except RepositoryConsistencyError as e:
                logger.warning(f"Skipping non-conforming artifact: {e}")
        return refs
