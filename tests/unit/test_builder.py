"""Unit tests for BuildOrchestrator."""

from pathlib import Path

import pytest

from aur_repo_builder.builder import BuildOrchestrator, BuildOutcome
from aur_repo_builder.core.commands import Makepkg, RepoAdd, VercmpCommand
from aur_repo_builder.core.exceptions import (
    ExternalCommandError,
    RepositoryConsistencyError,
    SrcinfoParseError,
)

DB_NAME = "custom.db.tar.zst"


@pytest.fixture
def orchestrator(repo_dir: Path, fake_runner) -> BuildOrchestrator:
    return BuildOrchestrator(
        repo_dir=repo_dir,
        repo_db=DB_NAME,
        makepkg=Makepkg(fake_runner),
        repo_add=RepoAdd(fake_runner),
        comparator=VercmpCommand(fake_runner),
    )


class TestProcess:
    def test_new_package_is_built_and_published(
        self, orchestrator: BuildOrchestrator, fake_runner, repo_dir: Path, make_definition
    ) -> None:
        """未公開の定義をビルドして公開すること."""
        definition = make_definition("foo", "1.0", 1)

        result = orchestrator.process(definition)

        assert result.outcome is BuildOutcome.BUILT
        assert (repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst").is_file()
        assert (repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst.sig").is_file()
        assert result.published == (repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst",)
        assert fake_runner.commands("repo-add") == [
            ["repo-add", str(repo_dir / DB_NAME), str(repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst")]
        ]

    def test_up_to_date_package_is_skipped(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, make_artifact, repo_dir: Path
    ) -> None:
        """公開済みと同じバージョンならビルドしないこと."""
        definition = make_definition("foo", "1.0", 1)
        make_artifact(repo_dir, "foo", "1.0", 1)

        result = orchestrator.process(definition)

        assert result.outcome is BuildOutcome.SKIPPED
        assert [args for args in fake_runner.commands("makepkg") if "--printsrcinfo" not in args] == []
        assert fake_runner.commands("repo-add") == []

    def test_install_flag_is_passed(self, orchestrator: BuildOrchestrator, fake_runner, make_definition) -> None:
        definition = make_definition("foo", "1.0", 1)

        orchestrator.process(definition, install=True)

        build_calls = [args for args in fake_runner.commands("makepkg") if "--printsrcinfo" not in args]
        assert build_calls == [["makepkg", "-s", "--noconfirm", "--skippgpcheck", "-i"]]

    def test_step_order(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, make_artifact, repo_dir: Path
    ) -> None:
        """srcinfo → vercmp → makepkg → repo-add の順に実行すること."""
        definition = make_definition("foo", "1.1", 1)
        make_artifact(repo_dir, "foo", "1.0", 1)

        orchestrator.process(definition)

        executables = [args[0] for args, _ in fake_runner.calls]
        assert executables == ["makepkg", "vercmp", "makepkg", "repo-add"]

    def test_no_rollback_when_index_update_fails(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, make_artifact, repo_dir: Path
    ) -> None:
        """repo-add が失敗しても旧バージョンの削除と新バージョンのコピーは巻き戻さないこと."""
        definition = make_definition("foo", "1.1", 1)
        make_artifact(repo_dir, "foo", "1.0", 1)
        fake_runner.returncodes["repo-add"] = 1

        with pytest.raises(ExternalCommandError):
            orchestrator.process(definition)

        assert sorted(p.name for p in repo_dir.iterdir()) == [
            "foo-1.1-1-x86_64.pkg.tar.zst",
            "foo-1.1-1-x86_64.pkg.tar.zst.sig",
        ]


class TestFailures:
    def test_malformed_srcinfo_stops_before_any_process(
        self, orchestrator: BuildOrchestrator, fake_runner, build_root: Path
    ) -> None:
        """pkgrel が無い場合は解析エラーになり、以降のコマンドを実行しないこと."""
        definition = build_root / "foo"
        definition.mkdir()
        fake_runner.srcinfo["foo"] = "pkgbase = foo\n\tpkgver = 1.0\n\npkgname = foo\n"

        with pytest.raises(SrcinfoParseError, match="pkgrel"):
            orchestrator.process(definition)

        assert [args[0] for args, _ in fake_runner.calls] == ["makepkg"]

    def test_build_failure_is_fatal(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, repo_dir: Path
    ) -> None:
        definition = make_definition("foo", "1.0", 1)
        fake_runner.build_returncode = 2

        with pytest.raises(ExternalCommandError, match="Failed to build"):
            orchestrator.process(definition)

        assert fake_runner.commands("repo-add") == []
        assert list(repo_dir.iterdir()) == []

    def test_missing_signature_in_build_dir_is_fatal(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, repo_dir: Path
    ) -> None:
        """ビルド結果に署名が無い場合は公開せずエラーにすること."""
        definition = make_definition("foo", "1.0", 1)
        fake_runner.sign = False

        with pytest.raises(RepositoryConsistencyError, match="signature"):
            orchestrator.process(definition)

        assert fake_runner.commands("repo-add") == []

    def test_purge_target_removed_concurrently_is_fatal(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, make_artifact, repo_dir: Path
    ) -> None:
        """削除対象が判定後に消えていた場合は FileNotFoundError になること."""
        definition = make_definition("foo", "1.1", 1)
        make_artifact(repo_dir, "foo", "1.0", 1)

        key = orchestrator.extract_metadata(definition)
        decision = orchestrator.decider.decide(key)
        (repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst.sig").unlink()

        with pytest.raises(FileNotFoundError):
            orchestrator.purge(decision)

    def test_vercmp_failure_is_fatal(
        self, orchestrator: BuildOrchestrator, fake_runner, make_definition, make_artifact, repo_dir: Path
    ) -> None:
        definition = make_definition("foo", "1.1", 1)
        make_artifact(repo_dir, "foo", "1.0", 1)
        fake_runner.returncodes["vercmp"] = 1

        with pytest.raises(ExternalCommandError):
            orchestrator.process(definition)

        assert (repo_dir / "foo-1.0-1-x86_64.pkg.tar.zst").is_file()
