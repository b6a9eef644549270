"""パッケージのバージョン識別子（VersionKey）と順序比較."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .exceptions import VersionComparisonError
from .vercmp import AlpmVersionComparator


class VersionComparator(Protocol):
    """2つのバージョン文字列を比較し、負/0/正の整数を返す比較器."""

    def compare(self, a: str, b: str) -> int: ...


_DEFAULT_COMPARATOR = AlpmVersionComparator()


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True)
class VersionKey:
    """1つのビルド単位（pkgbase）またはリポジトリ上の1成果物のバージョン識別子.

    Attributes:
        name: pkgbase（リポジトリから復元した場合は pkgname）
        version: 上流バージョン（epoch がある場合は `epoch:pkgver`）
        release: pkgrel（同一バージョンの再ビルド番号）
        members: この定義から生成される pkgname の並び
            （ファイル名から復元した場合は空）
    """

    name: str
    version: str
    release: int
    members: tuple[str, ...] = ()

    def compare(self, other: VersionKey, comparator: VersionComparator | None = None) -> int:
        """バージョン → release の順で比較し -1/0/1 を返す.

        Args:
            other: 比較相手
            comparator: バージョン文字列の比較器（None の場合はプロセス内実装）

        Returns:
            self < other なら -1、等しければ 0、self > other なら 1

        Raises:
            VersionComparisonError: 比較器が整数以外を返した場合
        """
        comparator = comparator or _DEFAULT_COMPARATOR
        result = comparator.compare(self.version, other.version)
        if not isinstance(result, int) or isinstance(result, bool):
            raise VersionComparisonError(
                f"Version comparator returned a non-integer result: {result!r}",
                command=[type(comparator).__name__, self.version, other.version],
            )
        if result != 0:
            return _sign(result)
        return _sign(self.release - other.release)

    def __lt__(self, other: VersionKey) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: VersionKey) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: VersionKey) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: VersionKey) -> bool:
        return self.compare(other) >= 0

    @property
    def full_version(self) -> str:
        """`version-release` 形式の表記."""
        return f"{self.version}-{self.release}"
