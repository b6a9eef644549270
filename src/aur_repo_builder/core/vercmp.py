"""pacman 互換のバージョン比較（プロセス内実装）.

`vercmp` コマンドと同じ順序規則で `[epoch:]version[-release]` を比較する。

- 数値セグメントは数値として比較（先頭ゼロは無視）
- 英字セグメントは辞書順で比較
- 数値セグメントは英字セグメントより大きい
- 区切り文字の連続長が異なる場合は長い方が大きい
- 末尾に残った英字セグメントは空文字列より小さい（1.0a < 1.0 < 1.0.1）

使用例:
    >>> vercmp("1.0", "1.0.1")
    -1
    >>> vercmp("1:1.0", "2.0")
    1
"""

from __future__ import annotations


def _isdigit(c: str) -> bool:
    return "0" <= c <= "9"


def _isalpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z"


def _isalnum(c: str) -> bool:
    return _isdigit(c) or _isalpha(c)


def _split_evr(evr: str) -> tuple[str, str, str | None]:
    """`[epoch:]version[-release]` を (epoch, version, release) に分解する."""
    i = 0
    while i < len(evr) and _isdigit(evr[i]):
        i += 1

    if i < len(evr) and evr[i] == ":":
        epoch = evr[:i] or "0"
        rest = evr[i + 1 :]
    else:
        epoch = "0"
        rest = evr

    version, sep, release = rest.rpartition("-")
    if not sep:
        return epoch, rest, None
    return epoch, version, release


def rpmvercmp(a: str, b: str) -> int:
    """セグメント単位でバージョン文字列を比較し -1/0/1 を返す."""
    if a == b:
        return 0

    one = two = 0
    ptr1 = ptr2 = 0
    len1, len2 = len(a), len(b)

    while one < len1 and two < len2:
        while one < len1 and not _isalnum(a[one]):
            one += 1
        while two < len2 and not _isalnum(b[two]):
            two += 1

        if one >= len1 or two >= len2:
            break

        # 区切り文字の長さが異なる場合はその時点で決着
        if (one - ptr1) != (two - ptr2):
            return -1 if (one - ptr1) < (two - ptr2) else 1

        ptr1, ptr2 = one, two
        if _isdigit(a[ptr1]):
            while ptr1 < len1 and _isdigit(a[ptr1]):
                ptr1 += 1
            while ptr2 < len2 and _isdigit(b[ptr2]):
                ptr2 += 1
            isnum = True
        else:
            while ptr1 < len1 and _isalpha(a[ptr1]):
                ptr1 += 1
            while ptr2 < len2 and _isalpha(b[ptr2]):
                ptr2 += 1
            isnum = False

        seg1 = a[one:ptr1]
        seg2 = b[two:ptr2]

        # 種類の異なるセグメント同士: 数値の方が大きい
        if not seg2:
            return 1 if isnum else -1

        if isnum:
            seg1 = seg1.lstrip("0")
            seg2 = seg2.lstrip("0")
            if len(seg1) != len(seg2):
                return 1 if len(seg1) > len(seg2) else -1

        if seg1 != seg2:
            return -1 if seg1 < seg2 else 1

        one, two = ptr1, ptr2

    if one >= len1 and two >= len2:
        return 0

    # 残った英字セグメントが空文字列に勝つことはない
    if (one >= len1 and not _isalpha(b[two])) or (one < len1 and _isalpha(a[one])):
        return -1
    return 1


def vercmp(a: str, b: str) -> int:
    """`vercmp` コマンド相当の比較.

    Args:
        a: 比較元バージョン（`[epoch:]version[-release]`）
        b: 比較先バージョン

    Returns:
        a < b なら -1、等しければ 0、a > b なら 1
    """
    if a == b:
        return 0

    epoch1, ver1, rel1 = _split_evr(a)
    epoch2, ver2, rel2 = _split_evr(b)

    ret = rpmvercmp(epoch1, epoch2)
    if ret == 0:
        ret = rpmvercmp(ver1, ver2)
        if ret == 0 and rel1 is not None and rel2 is not None:
            ret = rpmvercmp(rel1, rel2)
    return ret


class AlpmVersionComparator:
    """プロセス内で pacman のバージョン順序を評価する比較器."""

    def compare(self, a: str, b: str) -> int:
        return vercmp(a, b)
