"""Unit tests for repo_showcase.exceptions - centralized exception hierarchy."""

from __future__ import annotations

import pytest

from repo_showcase.exceptions import (
    MalformedUpstreamResponse,
    RepoShowcaseError,
    UpstreamError,
    UpstreamUnavailable,
)


class TestHierarchy:
    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(RepoShowcaseError, Exception)

    @pytest.mark.parametrize("cls", [UpstreamUnavailable, MalformedUpstreamResponse])
    def test_upstream_errors_share_a_base(self, cls: type[Exception]) -> None:
        assert issubclass(cls, UpstreamError)
        assert issubclass(cls, RepoShowcaseError)

    def test_kinds_are_distinct(self) -> None:
        assert not issubclass(MalformedUpstreamResponse, UpstreamUnavailable)
        assert not issubclass(UpstreamUnavailable, MalformedUpstreamResponse)


class TestUpstreamUnavailable:
    def test_carries_status_code(self) -> None:
        exc = UpstreamUnavailable("GitHub API returned status 502", status_code=502)
        assert exc.status_code == 502
        assert str(exc) == "GitHub API returned status 502"

    def test_status_code_optional(self) -> None:
        assert UpstreamUnavailable("timed out").status_code is None

    def test_caught_by_base(self) -> None:
        with pytest.raises(RepoShowcaseError):
            raise UpstreamUnavailable("down")
