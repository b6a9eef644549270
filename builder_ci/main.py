"""CI orchestrator: fetch AUR definitions, build stale packages, and publish them into the repository."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from loguru import logger

from aur_repo_builder import __version__
from aur_repo_builder.builder import BuildOrchestrator, BuildOutcome
from aur_repo_builder.core.artifacts import ArtifactNaming
from aur_repo_builder.core.commands import CommandRunner, Git, Makepkg, RepoAdd, VercmpCommand
from aur_repo_builder.core.vercmp import AlpmVersionComparator
from aur_repo_builder.core.version import VersionComparator
from builder_ci.config import BuildConfig, PackageSource, load_build_config
from builder_ci.fetcher import discover_definitions, fetch_aur_package
from builder_ci.report import (
    STATUS_BUILT,
    STATUS_FAILED,
    STATUS_SKIPPED,
    DefinitionReport,
    RunSummary,
    create_run_report,
    write_run_report,
)

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _default_config_path() -> Path:
    return Path(__file__).parent / "packages.yml"


def _comparator(config: BuildConfig, runner: CommandRunner | None) -> VersionComparator:
    if config.version_comparator == "builtin":
        return AlpmVersionComparator()
    return VercmpCommand(runner)


def create_orchestrator(config: BuildConfig, runner: CommandRunner | None = None) -> BuildOrchestrator:
    repo = config.repository
    return BuildOrchestrator(
        repo_dir=repo.path,
        repo_db=repo.database,
        makepkg=Makepkg(runner),
        repo_add=RepoAdd(runner),
        comparator=_comparator(config, runner),
        naming=ArtifactNaming(repo.package_ext, repo.architectures),
    )


def _select_definitions(config: BuildConfig) -> list[PackageSource]:
    if config.packages:
        return list(config.packages)
    return discover_definitions(config.build_root)


def _process_one(
    orchestrator: BuildOrchestrator,
    config: BuildConfig,
    source: PackageSource,
    git: Git,
    force_fetch: bool,
) -> DefinitionReport:
    definition_dir = config.build_root / source.name

    # 設定に列挙されたパッケージのみ AUR から取得する
    if config.fetch and config.packages:
        fetch_aur_package(source, definition_dir, force=force_fetch, git=git, url_template=config.aur_url)

    result = orchestrator.process(definition_dir, install=source.install)
    status = STATUS_BUILT if result.outcome is BuildOutcome.BUILT else STATUS_SKIPPED
    return DefinitionReport(
        name=result.key.name,
        status=status,
        version=result.key.version,
        release=result.key.release,
        members=list(result.key.members),
    )


def orchestrate(
    config: BuildConfig,
    force_fetch: bool = False,
    runner: CommandRunner | None = None,
) -> RunSummary:
    """全定義を順番に処理する.

    1定義の失敗はその定義の処理だけを打ち切り、記録して次へ進む。
    config.fail_fast が True の場合は最初の失敗で実行全体を中断する。
    どちらの方針も全種類のエラーに一律に適用する。

    Args:
        config: ビルド設定
        force_fetch: 既存の clone を削除して取得し直すか
        runner: 外部コマンドの実行器（None の場合は subprocess）

    Returns:
        実行結果
    """
    config.repository.path.mkdir(parents=True, exist_ok=True)
    config.build_root.mkdir(parents=True, exist_ok=True)

    orchestrator = create_orchestrator(config, runner)
    git = Git(runner)
    summary = RunSummary()

    definitions = _select_definitions(config)
    logger.info(f"=== Run start: {len(definitions)} definitions ===")

    for source in definitions:
        try:
            summary.results.append(_process_one(orchestrator, config, source, git, force_fetch))
        except Exception as e:
            logger.exception(f"Failed to process {source.name}: {e}")
            summary.results.append(
                DefinitionReport(name=source.name, status=STATUS_FAILED, error=f"{type(e).__name__}: {e}")
            )
            if config.fail_fast:
                logger.error("fail_fast is enabled, aborting the run")
                summary.aborted = True
                break

    logger.info(
        f"=== Run done: {summary.count(STATUS_BUILT)} built, {summary.count(STATUS_SKIPPED)} skipped, "
        f"{summary.count(STATUS_FAILED)} failed ==="
    )
    return summary


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Build AUR packages and publish them into a pacman repository")
    p.add_argument(
        "--config",
        type=Path,
        default=_default_config_path(),
        help="packages.yml path",
    )
    p.add_argument("--fail-fast", action="store_true", help="Abort the run on the first failure")
    p.add_argument("--no-fetch", action="store_true", help="Build existing definitions without fetching from AUR")
    p.add_argument("--force-fetch", action="store_true", help="Re-clone definitions instead of updating them")
    p.add_argument("--report", type=Path, default=None, help="Write a JSON run report to this path")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Log level (default: INFO)",
    )

    args = p.parse_args(argv)

    logger.remove()
    logger.add(sys.stdout, level=args.log_level)

    try:
        config = load_build_config(args.config)
        if args.fail_fast:
            config = replace(config, fail_fast=True)
        if args.no_fetch:
            config = replace(config, fetch=False)

        summary = orchestrate(config, force_fetch=args.force_fetch)

        if args.report:
            write_run_report(create_run_report(summary, config.repository.path, __version__), args.report)
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return 1

    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
