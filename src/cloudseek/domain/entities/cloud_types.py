"""Storage-provider tags used to bucket links."""

from __future__ import annotations

from enum import Enum


class CloudType(str, Enum):
    """Closed set of known storage types plus the ``others`` catch-all."""

    BAIDU = "baidu"
    ALIYUN = "aliyun"
    QUARK = "quark"
    TIANYI = "tianyi"
    XUNLEI = "xunlei"
    MOBILE = "mobile"
    P115 = "115"
    P123 = "123"
    UC = "uc"
    PIKPAK = "pikpak"
    LANZOU = "lanzou"
    MAGNET = "magnet"
    ED2K = "ed2k"
    OTHERS = "others"

    @classmethod
    def normalize(cls, tag: str | None) -> CloudType:
        """Map a raw tag onto a known type; unknown or empty tags become OTHERS."""
        if not tag:
            return cls.OTHERS
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return cls.OTHERS


KNOWN_CLOUD_TYPES: tuple[str, ...] = tuple(t.value for t in CloudType)
