"""builder_ci: AUR ビルドのCI統合レイヤ.

AUR 定義の取得、設定の読み込み、バッチ実行と実行レポートを提供する。
"""

from builder_ci.config import (
    BuildConfig,
    PackageSource,
    RepositoryConfig,
    load_build_config,
)
from builder_ci.fetcher import discover_definitions, fetch_aur_package
from builder_ci.report import (
    RunSummary,
    create_run_report,
    write_run_report,
)

__version__ = "0.1.0"

__all__ = [
    # config
    "BuildConfig",
    "PackageSource",
    "RepositoryConfig",
    "load_build_config",
    # fetcher
    "fetch_aur_package",
    "discover_definitions",
    # report
    "RunSummary",
    "create_run_report",
    "write_run_report",
]
