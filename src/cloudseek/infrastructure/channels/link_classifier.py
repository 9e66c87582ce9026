"""Extraction and classification of cloud-drive links in free text."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

from cloudseek.domain.entities import CloudType, Link

# Ordered: first match wins.
_TYPE_PATTERNS: list[tuple[CloudType, re.Pattern[str]]] = [
    (CloudType.MAGNET, re.compile(r"^magnet:\?", re.I)),
    (CloudType.ED2K, re.compile(r"^ed2k://", re.I)),
    (CloudType.BAIDU, re.compile(r"//(?:pan|yun)\.baidu\.com/", re.I)),
    (CloudType.ALIYUN, re.compile(r"//(?:www\.)?(?:aliyundrive\.com|alipan\.com)/", re.I)),
    (CloudType.QUARK, re.compile(r"//pan\.quark\.cn/", re.I)),
    (CloudType.TIANYI, re.compile(r"//cloud\.189\.cn/", re.I)),
    (CloudType.XUNLEI, re.compile(r"//pan\.xunlei\.com/", re.I)),
    (CloudType.MOBILE, re.compile(r"//(?:caiyun|yun)\.139\.com/", re.I)),
    (CloudType.P115, re.compile(r"//(?:[\w-]+\.)?115(?:cdn)?\.com/", re.I)),
    (CloudType.P123, re.compile(r"//(?:www\.)?123(?:pan|684|685|865|912)\.(?:com|cn)/", re.I)),
    (CloudType.UC, re.compile(r"//drive\.uc\.cn/", re.I)),
    (CloudType.PIKPAK, re.compile(r"//(?:www\.)?mypikpak\.com/", re.I)),
    (CloudType.LANZOU, re.compile(r"//(?:[\w-]+\.)?lanzo[uw]?[a-z]?\.com/|//(?:[\w-]+\.)?lanzn\.com/", re.I)),
]

_URL_RE = re.compile(
    r"magnet:\?xt=urn:btih:[0-9a-zA-Z]+[^\s<>\"']*"
    r"|ed2k://\|file\|[^\s<>\"']+"
    r"|https?://[^\s<>\"'，。；、）)\]]+",
    re.I,
)

_PASSWORD_RE = re.compile(
    r"(?:提取码|密码|访问码|pwd|password)\s*[:：=]?\s*([0-9a-zA-Z]{4,8})",
    re.I,
)

_TRAILING_PUNCT = ".,;!?"


def classify_url(url: str) -> CloudType:
    for cloud_type, pattern in _TYPE_PATTERNS:
        if pattern.search(url):
            return cloud_type
    return CloudType.OTHERS


def _password_from_url(url: str) -> str:
    try:
        query = parse_qs(urlsplit(url).query)
    except ValueError:
        return ""
    for key in ("pwd", "password", "passcode"):
        values = query.get(key)
        if values and values[0]:
            return values[0]
    return ""


def extract_password(text: str) -> str:
    """First extraction code found in *text* (``提取码: abcd``, ``pwd=abcd``)."""
    match = _PASSWORD_RE.search(text)
    return match.group(1) if match else ""


def extract_links(
    text: str,
    hrefs: list[str] | None = None,
    *,
    include_others: bool = False,
) -> list[Link]:
    """Collect cloud-drive links from anchor *hrefs* and plain *text*.

    Links are unique by URL, anchors first. Unrecognised hosts are
    dropped unless *include_others* is set. A password found in the
    text applies to links that do not carry one in their query string.
    """
    text_password = extract_password(text)
    candidates = list(hrefs or []) + _URL_RE.findall(text)

    links: list[Link] = []
    seen: set[str] = set()
    for raw in candidates:
        url = raw.strip().rstrip(_TRAILING_PUNCT)
        if not url or url in seen:
            continue
        cloud_type = classify_url(url)
        if cloud_type is CloudType.OTHERS and not include_others:
            continue
        seen.add(url)
        password = _password_from_url(url)
        if not password and cloud_type not in (CloudType.MAGNET, CloudType.ED2K):
            password = text_password
        links.append(Link(type=cloud_type.value, url=url, password=password))
    return links
