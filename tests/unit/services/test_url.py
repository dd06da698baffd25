"""Unit tests for GitHub repository URL helpers."""

import pytest

from app.core.exceptions import InvalidInputError
from app.services.analysis import (
    construct_github_url,
    parse_github_url,
    repo_id_from_url,
    validate_github_url,
)


class TestValidateGitHubUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/vercel/next.js",
            "https://github.com/octocat/Hello-World",
            "https://github.com/a/b",
        ],
    )
    def test_accepts_canonical_urls(self, url):
        assert validate_github_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "http://github.com/owner/repo",
            "https://github.com/owner/repo/",
            "https://github.com/owner/repo/tree/main",
            "https://github.com/owner",
            "https://gitlab.com/owner/repo",
            "github.com/owner/repo",
            "",
        ],
    )
    def test_rejects_other_shapes(self, url):
        assert validate_github_url(url) is False


class TestParseGitHubUrl:
    def test_splits_owner_and_repo(self):
        parsed = parse_github_url("https://github.com/octocat/Hello-World")

        assert parsed.owner == "octocat"
        assert parsed.repo == "Hello-World"
        assert parsed.url == "https://github.com/octocat/Hello-World"

    def test_invalid_url_names_expected_format(self):
        with pytest.raises(InvalidInputError, match="https://github.com/owner/repo") as exc_info:
            parse_github_url("https://github.com/octocat")

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.status_code == 400


class TestUrlHelpers:
    def test_construct_round_trips_through_parse(self):
        url = construct_github_url("octocat", "Hello-World")
        assert url == "https://github.com/octocat/Hello-World"
        assert parse_github_url(url).repo == "Hello-World"

    def test_repo_id_joins_owner_and_repo(self):
        assert repo_id_from_url("https://github.com/vercel/next.js") == "vercel-next.js"
