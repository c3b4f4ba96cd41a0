"""Tests for company URL normalization."""

import pytest

from company_enrichment.utils.url_normalizer import normalize, trim_url


class TestNormalize:
    """Test suite for normalize()."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://www.acme.com/", "acme.com"),
            ("ACME.COM", "acme.com"),
            ("http://acme.com", "acme.com"),
            ("www.acme.com", "acme.com"),
            ("  acme.com/  ", "acme.com"),
            ("https://acme.com/about/team", "acme.com"),
            ("acme.com:8080", "acme.com"),
            ("['https://Acme.io']", "acme.io"),
            ('"www.acme.co.uk"', "acme.co.uk"),
            ("http://https://www.acme.com", "acme.com"),
            ("https://www.www.acme.com", "acme.com"),
            ("http:/acme.com", "acme.com"),
            ("HTTPS:/www.Acme.com/", "acme.com"),
        ],
    )
    def test_canonical_domain(self, raw, expected):
        """Test that scheme, www, export noise and path are stripped."""
        assert normalize(raw) == expected

    def test_unparseable_input_is_returned_cleaned(self):
        """Test that a value with no hostname degrades to the cleaned string."""
        assert normalize("bad url") == "bad url"
        assert normalize("  'Bad URL'/ ") == "bad url"

    @pytest.mark.parametrize("raw", [None, "", "   ", "www.", "https://"])
    def test_empty_input(self, raw):
        """Test that empty or scheme-only input normalizes to an empty string."""
        assert normalize(raw) == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "https://www.acme.com/",
            "ACME.COM",
            "bad url",
            "['http://www.Example.org/path/']",
            "http://https://www.www.acme.com//",
            "acme.com:8080/x",
            "not a url at all/",
            "www.www.",
        ],
    )
    def test_idempotent(self, raw):
        """Test that normalizing twice gives the same result as normalizing once."""
        once = normalize(raw)
        assert normalize(once) == once

    def test_end_to_end_sample(self):
        """Test the mixed sample from a typical upload."""
        raws = ["https://www.acme.com/", "ACME.COM", "bad url"]
        assert [normalize(raw) for raw in raws] == ["acme.com", "acme.com", "bad url"]


class TestTrimUrl:
    """Test suite for trim_url()."""

    def test_removes_one_trailing_slash(self):
        assert trim_url("https://www.acme.com/") == "https://www.acme.com"
        assert trim_url("https://acme.com//") == "https://acme.com/"

    def test_strips_whitespace(self):
        assert trim_url("  acme.com/ ") == "acme.com"

    def test_empty(self):
        assert trim_url(None) == ""
        assert trim_url("") == ""
