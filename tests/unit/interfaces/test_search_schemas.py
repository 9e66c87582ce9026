"""Tests for search request validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cloudseek.interfaces.api.search.schemas import (
    HotSearchRecordModel,
    SearchRequestModel,
    validate_keyword,
)


class TestValidateKeyword:
    @pytest.mark.parametrize("kw", ["movie", "流浪地球 2", "Avatar 2009", "  spaced  "])
    def test_accepts(self, kw: str) -> None:
        assert validate_keyword(kw) == kw.strip()

    @pytest.mark.parametrize("kw", ["", "   ", "<script>", "a;drop", "x" * 101, 42])
    def test_rejects(self, kw: object) -> None:
        with pytest.raises(ValueError):
            validate_keyword(kw)


class TestSearchRequestModel:
    def test_defaults(self) -> None:
        req = SearchRequestModel.model_validate({"kw": "movie"})
        assert req.res == "merged_by_type"
        assert req.src == "all"
        assert req.refresh is False
        assert req.conc is None
        assert req.ext == {}

    def test_comma_lists(self) -> None:
        req = SearchRequestModel.model_validate(
            {"kw": "movie", "channels": "a, b,,", "cloud_types": ["quark", " "]}
        )
        assert req.channels == ["a", "b"]
        assert req.cloud_types == ["quark"]

    def test_query_string_values(self) -> None:
        req = SearchRequestModel.model_validate(
            {"kw": "movie", "conc": "4", "refresh": "true", "res": "", "src": ""}
        )
        assert req.conc == 4
        assert req.refresh is True
        assert req.res == "merged_by_type"
        assert req.src == "all"

    def test_ext_json_string(self) -> None:
        req = SearchRequestModel.model_validate({"kw": "m", "ext": '{"page": 2}'})
        assert req.ext == {"page": 2}

    @pytest.mark.parametrize("ext", ["{bad json", "[1, 2]"])
    def test_ext_invalid(self, ext: str) -> None:
        with pytest.raises(ValidationError):
            SearchRequestModel.model_validate({"kw": "m", "ext": ext})

    @pytest.mark.parametrize(
        "payload",
        [
            {"kw": "m", "conc": 0},
            {"kw": "m", "conc": 21},
            {"kw": "m", "res": "everything"},
            {"kw": "m", "src": "web"},
            {"kw": "m", "channels": [f"c{i}" for i in range(51)]},
            {"kw": "m", "plugins": [f"p{i}" for i in range(21)]},
            {"kw": "m", "cloud_types": [f"t{i}" for i in range(11)]},
            {},
        ],
    )
    def test_rejects(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            SearchRequestModel.model_validate(payload)

    def test_src_tg_clears_plugins(self) -> None:
        req = SearchRequestModel.model_validate(
            {"kw": "m", "src": "tg", "plugins": "p1", "channels": "c1"}
        )
        assert req.plugins is None
        assert req.channels == ["c1"]

    def test_src_plugin_clears_channels(self) -> None:
        req = SearchRequestModel.model_validate(
            {"kw": "m", "src": "plugin", "plugins": "p1", "channels": "c1"}
        )
        assert req.channels is None
        assert req.plugins == ["p1"]

    def test_to_profile(self) -> None:
        profile = SearchRequestModel.model_validate(
            {"kw": "movie", "conc": 3, "channels": "a", "cloud_types": "quark"}
        ).to_profile()
        assert profile.keyword == "movie"
        assert profile.concurrency == 3
        assert profile.channels == ("a",)
        assert profile.plugins is None
        assert profile.cloud_types == ("quark",)


def test_hot_search_record_model() -> None:
    assert HotSearchRecordModel.model_validate({"term": " movie "}).term == "movie"
    with pytest.raises(ValidationError):
        HotSearchRecordModel.model_validate({"term": "<bad>"})
