"""Unit tests for the shared FastAPI dependencies."""

import pytest

from thoraxlab.server.services.deps import extract_token


class TestExtractToken:
    def test_bearer_header(self):
        assert extract_token("Bearer abc123", None) == "abc123"

    def test_scheme_is_case_insensitive(self):
        assert extract_token("bearer   abc123  ", None) == "abc123"

    def test_header_wins_over_query(self):
        assert extract_token("Bearer header-token", "query-token") == "header-token"

    def test_falls_back_to_session_id(self):
        assert extract_token(None, "query-token") == "query-token"

    @pytest.mark.parametrize("header", ["Basic abc", "Bearer", "Bearer   ", "abc123"])
    def test_non_bearer_header_is_ignored(self, header):
        assert extract_token(header, None) is None

    def test_empty_session_id(self):
        assert extract_token(None, "") is None
