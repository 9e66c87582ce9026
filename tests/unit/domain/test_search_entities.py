"""Tests for search domain entities."""

from __future__ import annotations

import dataclasses

import pytest

from cloudseek.domain.entities import (
    PLUGIN_TIMEOUT_EXT_KEY,
    CloudType,
    Link,
    SearchRequestProfile,
    SearchResponse,
    SearchResult,
)


class TestLink:
    def test_to_dict_omits_merge_fields(self) -> None:
        link = Link(type="quark", url="https://pan.quark.cn/s/a", password="x1y2")
        assert link.to_dict() == {
            "type": "quark",
            "url": "https://pan.quark.cn/s/a",
            "password": "x1y2",
        }

    def test_to_merged_dict(self) -> None:
        link = Link(
            type="baidu",
            url="https://pan.baidu.com/s/1",
            title="Movie",
            datetime="2025-01-01T00:00:00Z",
            source="chan",
        )
        d = link.to_merged_dict()
        assert d["title"] == "Movie"
        assert d["source"] == "chan"
        assert "type" not in d

    def test_frozen(self) -> None:
        link = Link(type="quark", url="u")
        with pytest.raises(dataclasses.FrozenInstanceError):
            link.url = "other"  # type: ignore[misc]


class TestSearchResult:
    def test_list_links_become_tuple(self) -> None:
        result = SearchResult(
            unique_id="p-1",
            channel="",
            datetime="",
            title="t",
            links=[Link(type="quark", url="u")],  # type: ignore[arg-type]
        )
        assert isinstance(result.links, tuple)

    def test_message_id_defaults_to_unique_id(self) -> None:
        result = SearchResult(unique_id="p-1", channel="", datetime="", title="t")
        assert result.message_id == "p-1"

    def test_to_dict(self, search_result: SearchResult) -> None:
        d = search_result.to_dict()
        assert d["unique_id"] == "r1"
        assert d["links"] == [
            {"type": "quark", "url": "https://pan.quark.cn/s/abc", "password": ""}
        ]


class TestSearchRequestProfile:
    def test_sequences_are_frozen_to_tuples(self) -> None:
        profile = SearchRequestProfile(
            keyword="k",
            channels=["a", "b"],  # type: ignore[arg-type]
            cloud_types=["quark"],  # type: ignore[arg-type]
        )
        assert profile.channels == ("a", "b")
        assert profile.cloud_types == ("quark",)

    def test_ext_is_read_only(self) -> None:
        profile = SearchRequestProfile(keyword="k", ext={"a": 1})
        with pytest.raises(TypeError):
            profile.ext["b"] = 2  # type: ignore[index]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(1500, 1500), ("2000", 2000), (0, None), (-5, None), ("x", None), (True, None)],
    )
    def test_plugin_timeout_from_ext(self, raw: object, expected: int | None) -> None:
        profile = SearchRequestProfile(keyword="k", ext={PLUGIN_TIMEOUT_EXT_KEY: raw})
        assert profile.plugin_timeout_ms == expected

    def test_plugin_timeout_absent(self) -> None:
        assert SearchRequestProfile(keyword="k").plugin_timeout_ms is None


class TestSearchResponse:
    def test_to_dict_only_includes_requested_shapes(self) -> None:
        assert SearchResponse(total=3).to_dict() == {"total": 3}

    def test_to_dict_merged(self) -> None:
        response = SearchResponse(
            total=1,
            merged_by_type={"quark": [Link(type="quark", url="u", title="t")]},
        )
        d = response.to_dict()
        assert d["merged_by_type"]["quark"][0]["url"] == "u"
        assert "results" not in d


class TestCloudType:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("quark", CloudType.QUARK),
            (" Baidu ", CloudType.BAIDU),
            ("115", CloudType.P115),
            ("dropbox", CloudType.OTHERS),
            ("", CloudType.OTHERS),
            (None, CloudType.OTHERS),
        ],
    )
    def test_normalize(self, raw: str | None, expected: CloudType) -> None:
        assert CloudType.normalize(raw) is expected
