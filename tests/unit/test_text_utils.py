"""Tests for provider value parsing helpers."""

import pytest

from company_enrichment.utils.text_utils import extract_linkedin_url, parse_number


class TestExtractLinkedinUrl:
    """Test suite for extract_linkedin_url()."""

    def test_finds_profile_in_free_text(self):
        text = "Jane Doe (CEO) https://www.linkedin.com/in/jane-doe-42, John"
        assert extract_linkedin_url(text) == "https://www.linkedin.com/in/jane-doe-42"

    def test_first_profile_wins(self):
        text = "https://linkedin.com/in/first https://linkedin.com/in/second"
        assert extract_linkedin_url(text) == "https://linkedin.com/in/first"

    @pytest.mark.parametrize(
        "text",
        [None, "", "no profile here", "https://linkedin.com/company/acme"],
    )
    def test_no_profile(self, text):
        assert extract_linkedin_url(text) is None


class TestParseNumber:
    """Test suite for parse_number()."""

    @pytest.mark.parametrize(
        "value, expected",
        [(42, 42.0), (3.5, 3.5), ("1,250", 1250.0), (" 17 ", 17.0), ("-4", -4.0)],
    )
    def test_numbers(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize(
        "value", [None, True, "", "N/A", "twelve", "nan", "inf", float("inf")]
    )
    def test_non_numbers(self, value):
        assert parse_number(value) is None
