"""実行レポート（build_report.json）の生成.

レポートは記録用であり、ビルド要否の判定には使わない（判定は常にリポジトリの実ファイルから行う）。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

STATUS_BUILT = "built"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@dataclass
class DefinitionReport:
    name: str
    status: str
    version: str | None = None
    release: int | None = None
    members: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class RunSummary:
    """1回の実行結果."""

    results: list[DefinitionReport] = field(default_factory=list)
    aborted: bool = False

    @property
    def failed(self) -> list[DefinitionReport]:
        return [r for r in self.results if r.status == STATUS_FAILED]

    @property
    def ok(self) -> bool:
        return not self.aborted and not self.failed

    def count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)


def create_run_report(summary: RunSummary, repo_dir: Path, builder_version: str = "0.1.0") -> dict:
    """実行レポートを作成.

    Args:
        summary: 実行結果
        repo_dir: 公開先リポジトリ
        builder_version: aur_repo_builder のバージョン

    Returns:
        レポート辞書
    """
    return {
        "run_info": {
            "finished_at": datetime.now(UTC).isoformat(),
            "repo_dir": str(repo_dir),
            "builder_version": builder_version,
            "aborted": summary.aborted,
        },
        "statistics": {
            "built": summary.count(STATUS_BUILT),
            "skipped": summary.count(STATUS_SKIPPED),
            "failed": summary.count(STATUS_FAILED),
        },
        "definitions": [
            {
                "name": r.name,
                "status": r.status,
                "version": r.version,
                "release": r.release,
                "members": r.members,
                "error": r.error,
            }
            for r in summary.results
        ],
    }


def write_run_report(report: dict, output_path: Path) -> None:
    """レポートをJSONファイルとして保存."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    logger.info(f"Run report written to {output_path}")
