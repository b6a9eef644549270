""".SRCINFO（`makepkg --printsrcinfo` の出力）の解析.

pkgbase / pkgname はインデントなし、pkgver / pkgrel / epoch は pkgbase セクション内で
インデントされた行として現れる。pkgname セクション内の個別オーバーライドは扱わない。
"""

from __future__ import annotations

import re

from .exceptions import SrcinfoParseError
from .version import VersionKey

PKGBASE_RE = re.compile(r"^pkgbase = (?P<pkgbase>.+)$", re.MULTILINE)
PKGVER_RE = re.compile(r"^[ \t]+pkgver = (?P<pkgver>.+)$", re.MULTILINE)
PKGREL_RE = re.compile(r"^[ \t]+pkgrel = (?P<pkgrel>.+)$", re.MULTILINE)
EPOCH_RE = re.compile(r"^[ \t]+epoch = (?P<epoch>.+)$", re.MULTILINE)
PKGNAME_RE = re.compile(r"^pkgname = (?P<pkgname>.+)$", re.MULTILINE)


def parse_srcinfo(text: str, source: str = "<srcinfo>") -> VersionKey:
    """.SRCINFO テキストから VersionKey を組み立てる.

    Args:
        text: .SRCINFO の内容
        source: エラーメッセージ用の識別子（定義ディレクトリ等）

    Returns:
        members に全 pkgname を持つ VersionKey

    Raises:
        SrcinfoParseError: pkgbase/pkgver/pkgrel/pkgname のいずれかが欠落・不正な場合
    """
    base_match = PKGBASE_RE.search(text)
    if not base_match:
        raise SrcinfoParseError(source, "pkgbase")
    ver_match = PKGVER_RE.search(text)
    if not ver_match:
        raise SrcinfoParseError(source, "pkgver")
    rel_match = PKGREL_RE.search(text)
    if not rel_match:
        raise SrcinfoParseError(source, "pkgrel")

    members = tuple(m.group("pkgname").strip() for m in PKGNAME_RE.finditer(text))
    if not members:
        raise SrcinfoParseError(source, "pkgname")

    pkgrel = rel_match.group("pkgrel").strip()
    try:
        release = int(pkgrel)
    except ValueError as e:
        raise SrcinfoParseError(source, "pkgrel", f"not an integer ({pkgrel!r})") from e

    version = ver_match.group("pkgver").strip()
    if not version:
        raise SrcinfoParseError(source, "pkgver", "empty")

    # ファイル名上の表記（epoch:pkgver）に合わせる
    epoch_match = EPOCH_RE.search(text)
    if epoch_match:
        epoch = epoch_match.group("epoch").strip()
        if not epoch.isdigit():
            raise SrcinfoParseError(source, "epoch", f"not an integer ({epoch!r})")
        if int(epoch) > 0:
            version = f"{epoch}:{version}"

    return VersionKey(
        name=base_match.group("pkgbase").strip(),
        version=version,
        release=release,
        members=members,
    )
