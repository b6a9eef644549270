"""ビルド設定（packages.yml）の読み込み."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from loguru import logger

from aur_repo_builder.core.artifacts import DEFAULT_ARCHITECTURES, DEFAULT_PACKAGE_EXT

AUR_URL_TEMPLATE = "https://aur.archlinux.org/{name}.git"
VERSION_COMPARATORS = ("vercmp", "builtin")


@dataclass(frozen=True)
class PackageSource:
    name: str
    install: bool = False
    url: str | None = None

    def clone_url(self, template: str = AUR_URL_TEMPLATE) -> str:
        return self.url or template.format(name=self.name)


@dataclass(frozen=True)
class RepositoryConfig:
    path: Path
    database: str
    package_ext: str = DEFAULT_PACKAGE_EXT
    architectures: tuple[str, ...] = DEFAULT_ARCHITECTURES


@dataclass(frozen=True)
class BuildConfig:
    """1回の実行に必要な設定.

    Attributes:
        repository: 公開先リポジトリ
        build_root: 定義ディレクトリを置くルート
        packages: 取得・ビルドするパッケージ（空ならビルドルート配下を走査）
        fetch: AUR から取得するか
        fail_fast: 最初の失敗で実行全体を中断するか
        version_comparator: "vercmp"（外部コマンド）または "builtin"
        aur_url: clone URL のテンプレート
    """

    repository: RepositoryConfig
    build_root: Path
    packages: tuple[PackageSource, ...] = field(default_factory=tuple)
    fetch: bool = True
    fail_fast: bool = False
    version_comparator: str = "vercmp"
    aur_url: str = AUR_URL_TEMPLATE


def _resolve(base_dir: Path, value: str | Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else (base_dir / path).resolve()


def _bool_option(section: dict, key: str, default: bool, where: str) -> bool:
    # "false" のような文字列は真偽値として扱わない
    value = section.get(key, default)
    if not isinstance(value, bool):
        msg = f"Invalid value for {where}.{key}: expected true/false, got {value!r}"
        raise ValueError(msg)
    return value


def _architectures(repo: dict) -> tuple[str, ...]:
    value = repo.get("architectures")
    if value is None:
        return DEFAULT_ARCHITECTURES
    if not isinstance(value, list) or not value or not all(isinstance(a, str) and a for a in value):
        msg = f"Invalid value for repository.architectures: expected a non-empty list of strings, got {value!r}"
        raise ValueError(msg)
    return tuple(value)


def _parse_package(entry: object) -> PackageSource | None:
    if isinstance(entry, str):
        return PackageSource(name=entry)
    if not isinstance(entry, dict) or not entry.get("name"):
        raise ValueError(f"Invalid package entry: {entry!r}")
    where = f"packages[{entry['name']}]"
    if not _bool_option(entry, "enabled", True, where):
        return None
    return PackageSource(
        name=str(entry["name"]),
        install=_bool_option(entry, "install", False, where),
        url=entry.get("url"),
    )


def load_build_config(config_path: Path) -> BuildConfig:
    """YAML 設定を読み込む.

    相対パスは設定ファイルのあるディレクトリを基準に解決する。

    Args:
        config_path: 設定ファイルのパス

    Returns:
        ビルド設定

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: 必須項目の欠落、または値が不正な場合
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        msg = f"Config file must contain a mapping, got {type(config)}"
        raise ValueError(msg)

    base_dir = config_path.resolve().parent

    repo = config.get("repository") or {}
    if not isinstance(repo, dict) or not repo.get("path") or not repo.get("database"):
        raise ValueError("repository.path and repository.database are required")

    architectures = _architectures(repo)
    repository = RepositoryConfig(
        path=_resolve(base_dir, repo["path"]),
        database=str(repo["database"]),
        package_ext=str(repo.get("package_ext", DEFAULT_PACKAGE_EXT)),
        architectures=architectures,
    )

    build = config.get("build") or {}
    if not isinstance(build, dict):
        raise ValueError(f"build must be a mapping, got {type(build)}")
    comparator = build.get("version_comparator", "vercmp")
    if comparator not in VERSION_COMPARATORS:
        msg = f"Invalid version_comparator '{comparator}'. Valid values: {VERSION_COMPARATORS}"
        raise ValueError(msg)

    packages = tuple(p for p in (_parse_package(e) for e in config.get("packages") or []) if p is not None)

    build_config = BuildConfig(
        repository=repository,
        build_root=_resolve(base_dir, build.get("root", "build")),
        packages=packages,
        fetch=_bool_option(build, "fetch", True, "build"),
        fail_fast=_bool_option(build, "fail_fast", False, "build"),
        version_comparator=comparator,
        aur_url=str(build.get("aur_url", AUR_URL_TEMPLATE)),
    )

    logger.info(f"Loaded {len(packages)} enabled packages from {config_path}")
    return build_config
