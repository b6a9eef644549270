"""pacman リポジトリディレクトリの整合性チェックを行い、TSVレポートを出力する。"""

from __future__ import annotations

import argparse
import csv
from collections import defaultdict
from collections.abc import Iterable, Sequence
from pathlib import Path

from aur_repo_builder.core.artifacts import (
    DEFAULT_ARCHITECTURES,
    DEFAULT_PACKAGE_EXT,
    ArtifactKind,
    ArtifactNaming,
    ArtifactRef,
)
from aur_repo_builder.core.repository import RepositoryIndex


def _write_tsv(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(list(header))
        count = 0
        for r in rows:
            writer.writerow(["" if v is None else v for v in r])
            count += 1
    return count


def run_health_checks(repo_dir: Path, out_dir: Path, naming: ArtifactNaming | None = None) -> Path:
    repo_dir = Path(repo_dir)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    refs = RepositoryIndex(repo_dir, naming).scan()
    packages = [r for r in refs if r.kind is ArtifactKind.PACKAGE]
    signatures = [r for r in refs if r.kind is ArtifactKind.SIGNATURE]

    def ident(r: ArtifactRef) -> tuple[str, str, int, str]:
        return (r.name, r.version, r.release, r.arch)

    package_ids = {ident(r) for r in packages}
    signature_ids = {ident(r) for r in signatures}

    packages_out = out_dir / "packages.tsv"
    packages_count = _write_tsv(
        packages_out,
        ["name", "version", "release", "arch", "filename"],
        [(r.name, r.version, r.release, r.arch, r.filename) for r in packages],
    )

    # 同じ pkgname が複数ビルド公開されている（判定時に致命的エラーになる状態）
    by_name: dict[str, list[str]] = defaultdict(list)
    for r in packages:
        by_name[r.name].append(f"{r.version}-{r.release}")
    duplicates = sorted((name, len(v), ",".join(v)) for name, v in by_name.items() if len(v) > 1)
    duplicates_out = out_dir / "duplicate_packages.tsv"
    duplicates_count = _write_tsv(duplicates_out, ["name", "count", "versions"], duplicates)

    # Signatures
    missing_sig_out = out_dir / "missing_signatures.tsv"
    missing_sig_count = _write_tsv(
        missing_sig_out,
        ["name", "version", "release", "arch", "filename"],
        [(*ident(r), r.filename) for r in packages if ident(r) not in signature_ids],
    )

    orphan_sig_out = out_dir / "orphan_signatures.tsv"
    orphan_sig_count = _write_tsv(
        orphan_sig_out,
        ["name", "version", "release", "arch", "filename"],
        [(*ident(r), r.filename) for r in signatures if ident(r) not in package_ids],
    )

    summary_out = out_dir / "repo_health_summary.tsv"
    _write_tsv(
        summary_out,
        ["metric", "value"],
        [
            ("repo_dir", str(repo_dir)),
            ("total_packages", packages_count),
            ("total_signatures", len(signatures)),
            ("duplicate_packages", duplicates_count),
            ("missing_signatures", missing_sig_count),
            ("orphan_signatures", orphan_sig_count),
        ],
    )

    return summary_out


def main() -> None:
    p = argparse.ArgumentParser(description="Check pacman repository consistency and write TSV reports.")
    p.add_argument("--repo-dir", type=Path, required=True, help="Path to the repository directory")
    p.add_argument("--out-dir", type=Path, required=True, help="Output directory for TSV reports")
    p.add_argument("--package-ext", default=DEFAULT_PACKAGE_EXT, help="Package file extension")
    p.add_argument(
        "--arch",
        action="append",
        default=None,
        help=f"Allowed architecture (repeatable, default: {' '.join(DEFAULT_ARCHITECTURES)})",
    )
    args = p.parse_args()

    naming = ArtifactNaming(args.package_ext, args.arch or DEFAULT_ARCHITECTURES)
    summary = run_health_checks(args.repo_dir, args.out_dir, naming)
    print(f"Wrote health reports: {summary.parent}")


if __name__ == "__main__":
    main()
