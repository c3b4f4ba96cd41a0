"""Tests for decoding loosely shaped provider payloads."""

import pytest

from company_enrichment.models import (
    CrmAccount,
    CrmBatchResponse,
    GraphOrganization,
    MetadataResponse,
)

ACME_ACCOUNT = {"Id": "001A", "Owner": {"Name": "Dana Owner"}}


class TestMetadataResponse:
    """Test suite for MetadataResponse decoding."""

    def test_null_record_is_dropped(self):
        """Test that a null element does not invalidate the other records."""
        response = MetadataResponse.model_validate(
            {"acme.com": [None, {"Name": ["Acme"]}], "globex.com": [{"Name": "Globex"}]}
        )

        assert response.richest("acme.com").first("name") == "Acme"
        assert response.richest("globex.com").first("name") == "Globex"

    @pytest.mark.parametrize("records", [None, "Acme", {"Name": ["Acme"]}, 3])
    def test_non_list_records_decode_as_absent(self, records):
        response = MetadataResponse.model_validate(
            {"acme.com": records, "globex.com": [{"Name": ["Globex"]}]}
        )

        assert response.richest("acme.com") is None
        assert response.richest("globex.com").first("name") == "Globex"

    @pytest.mark.parametrize("payload", [None, [], "error"])
    def test_non_object_payload_is_empty(self, payload):
        assert MetadataResponse.model_validate(payload).root == {}


class TestCrmBatchResponse:
    """Test suite for CrmBatchResponse decoding."""

    @pytest.mark.parametrize(
        "salesforce",
        [
            {"websites": {"acme.com": None}},
            {"websites": []},
            {"websites": None, "names": None},
            {"names": {"Acme": "001A"}},
            {"websites": {"acme.com": [None, "001A"]}},
            [],
            "unavailable",
        ],
    )
    def test_malformed_sections_decode_as_no_match(self, salesforce):
        response = CrmBatchResponse.model_validate({"salesforce": salesforce})

        assert response.record_for("acme.com", "Acme") is None

    def test_malformed_entry_does_not_hide_other_domains(self):
        response = CrmBatchResponse.model_validate(
            {
                "salesforce": {
                    "websites": {"acme.com": None, "globex.com": [None, ACME_ACCOUNT]},
                    "names": None,
                },
                "specter": [None, "x", {"Company_Name": ["Globex"]}],
            }
        )

        record = response.record_for("globex.com", "Globex")
        assert record.account.account_id == "001A"
        assert record.company.first("company_name") == "Globex"
        assert response.record_for("acme.com", "Acme") is None

    @pytest.mark.parametrize("payload", [None, [], "error"])
    def test_non_object_payload_is_empty(self, payload):
        response = CrmBatchResponse.model_validate(payload)

        assert response.salesforce is None
        assert response.specter == []


class TestCrmAccount:
    """Test suite for CrmAccount decoding."""

    def test_numeric_id_becomes_text(self):
        assert CrmAccount.model_validate({"Id": 1001}).account_id == "1001"

    def test_malformed_nested_objects_are_absent(self):
        account = CrmAccount.model_validate(
            {"Owner": "Dana Owner", "attributes": ["x"], "Website": {"url": "acme.com"}}
        )

        assert account.owner is None
        assert account.attributes is None
        assert account.website is None
        assert account.owner_name is None


class TestGraphOrganization:
    """Test suite for GraphOrganization decoding."""

    def test_malformed_fields_are_absent(self):
        organization = GraphOrganization.model_validate(
            {
                "id": 77,
                "name": ["Acme"],
                "domains": ["acme.com", None, 5],
                "interaction_dates": "never",
            }
        )

        assert organization.name is None
        assert organization.domains == ["acme.com"]
        assert organization.interaction_dates is None
