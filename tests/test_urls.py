"""Tests for adolinks.integrations.urls module."""

import pytest

from adolinks.integrations.urls import (
    AdoBuildUrls,
    AdoProjectUrls,
    parse_browser_url,
    parse_organization_and_project_urls,
)
from adolinks.utils.errors import ExitCode, InvalidBrowserUrlError


class TestParseBrowserUrl:
    """Tests for parse_browser_url."""

    def test_on_premises_collection(self):
        """Collection and project URLs come from the path before _build."""
        urls = parse_browser_url(
            "http://redstoneblock/DefaultCollection/Deployable/_build/results?buildId=24"
        )

        assert urls.organization_url == "http://redstoneblock/DefaultCollection"
        assert urls.project_url == "http://redstoneblock/DefaultCollection/Deployable"
        assert urls.build_id == 24

    def test_hosted_organization(self):
        urls = parse_browser_url("https://dev.azure.com/contoso/Backend/_build/results?buildId=7")

        assert urls.organization_url == "https://dev.azure.com/contoso"
        assert urls.project_url == "https://dev.azure.com/contoso/Backend"
        assert urls.build_id == 7

    def test_legacy_build_page(self):
        """Older build pages use _build/index with extra query parameters."""
        urls = parse_browser_url(
            "https://contoso.visualstudio.com/Web/_build/index?_a=summary&buildId=311"
        )

        assert urls.organization_url == "https://contoso.visualstudio.com"
        assert urls.project_url == "https://contoso.visualstudio.com/Web"
        assert urls.build_id == 311

    def test_build_id_key_is_case_insensitive(self):
        urls = parse_browser_url("https://dev.azure.com/contoso/Backend/_build?BUILDID=5")

        assert urls.build_id == 5

    def test_surrounding_whitespace_is_ignored(self):
        urls = parse_browser_url("  https://dev.azure.com/contoso/Backend/_build?buildId=5  ")

        assert urls.build_id == 5
        assert urls.project_url == "https://dev.azure.com/contoso/Backend"

    def test_build_summary_url_selects_results_view(self):
        urls = parse_browser_url("https://dev.azure.com/contoso/Backend/_build/results?buildId=9")

        assert urls.build_summary_url == (
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=9&view=results"
        )

    def test_build_summary_url_replaces_existing_view(self):
        urls = parse_browser_url(
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=9&view=logs"
        )

        assert urls.build_summary_url == (
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=9&view=results"
        )

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "not a url",
            "https://dev.azure.com/contoso/Backend/_release?releaseId=4",
            "https://dev.azure.com/contoso/Backend/_build/results",
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=abc",
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=0",
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=-3",
            "ftp://dev.azure.com/contoso/Backend/_build/results?buildId=3",
            "https://dev.azure.com/_build/results?buildId=3",
        ],
    )
    def test_invalid_urls_raise(self, url):
        with pytest.raises(InvalidBrowserUrlError, match="Unrecognized build browse URL."):
            parse_browser_url(url)

    def test_error_is_a_value_error_with_exit_code(self):
        with pytest.raises(ValueError) as exc_info:
            parse_browser_url("https://example.com/nothing")

        assert exc_info.value.exit_code == ExitCode.INVALID_ARGUMENT
        assert exc_info.value.url == "https://example.com/nothing"


class TestParseOrganizationAndProjectUrls:
    """Tests for parse_organization_and_project_urls."""

    def test_organization_only(self):
        urls = parse_organization_and_project_urls("https://dev.azure.com/contoso")

        assert urls.organization_url == "https://dev.azure.com/contoso"
        assert urls.project_url is None

    def test_organization_and_project(self):
        urls = parse_organization_and_project_urls("https://dev.azure.com/contoso/Backend")

        assert urls.organization_url == "https://dev.azure.com/contoso"
        assert urls.project_url == "https://dev.azure.com/contoso/Backend"

    def test_trailing_slashes_are_ignored(self):
        urls = parse_organization_and_project_urls("http://redstoneblock/DefaultCollection/")

        assert urls.organization_url == "http://redstoneblock/DefaultCollection"
        assert urls.project_url is None

    def test_segments_after_project_are_ignored(self):
        urls = parse_organization_and_project_urls(
            "https://dev.azure.com/contoso/Backend/_workitems/edit/4"
        )

        assert urls.project_url == "https://dev.azure.com/contoso/Backend"

    def test_underscore_segment_is_not_a_project(self):
        urls = parse_organization_and_project_urls("https://dev.azure.com/contoso/_settings")

        assert urls.project_url is None

    def test_legacy_host_is_the_organization(self):
        urls = parse_organization_and_project_urls("https://contoso.visualstudio.com/")

        assert urls.organization_url == "https://contoso.visualstudio.com"
        assert urls.project_url is None

    def test_legacy_host_with_project(self):
        urls = parse_organization_and_project_urls("https://contoso.visualstudio.com/Web")

        assert urls.organization_url == "https://contoso.visualstudio.com"
        assert urls.project_url == "https://contoso.visualstudio.com/Web"

    @pytest.mark.parametrize("url", ["", "dev.azure.com/contoso", "https://dev.azure.com/"])
    def test_invalid_base_urls_raise(self, url):
        with pytest.raises(InvalidBrowserUrlError, match="Unrecognized Azure DevOps base URL"):
            parse_organization_and_project_urls(url)


class TestUrlTypes:
    """Tests for the URL dataclasses."""

    def test_project_must_be_within_organization(self):
        with pytest.raises(ValueError):
            AdoProjectUrls(
                organization_url="https://dev.azure.com/contoso",
                project_url="https://dev.azure.com/fabrikam/Web",
            )

    def test_create_build_urls_for_project(self):
        project = AdoProjectUrls(
            organization_url="https://dev.azure.com/contoso",
            project_url="https://dev.azure.com/contoso/Backend",
        )

        urls = AdoBuildUrls.create(project, 1)

        assert urls.build_id == 1
        assert urls.project_url == project.project_url
        assert urls.organization_url == project.organization_url
        assert urls.build_summary_url == (
            "https://dev.azure.com/contoso/Backend/_build/results?buildId=1&view=results"
        )

    def test_create_requires_project(self):
        with pytest.raises(ValueError):
            AdoBuildUrls.create(AdoProjectUrls(organization_url="https://dev.azure.com/contoso"), 1)

    def test_build_id_must_be_positive(self):
        with pytest.raises(ValueError):
            AdoBuildUrls(
                organization_url="https://dev.azure.com/contoso",
                project_url="https://dev.azure.com/contoso/Backend",
                build_id=0,
            )

    def test_urls_are_immutable(self):
        urls = parse_browser_url("https://dev.azure.com/contoso/Backend/_build?buildId=5")

        with pytest.raises(AttributeError):
            urls.build_id = 6  # type: ignore[misc]
