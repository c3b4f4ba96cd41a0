"""Spreadsheet input reading, row assembly and CSV serialization."""

import csv
import io
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from ulid import ULID

from .exceptions import InputFormatError
from .models import (
    ERROR_MARKER,
    DomainFailure,
    InputRecord,
    MergedCompany,
    OutputRow,
)
from .utils import trim_url

logger = logging.getLogger(__name__)

URL_COLUMN = "company_url"

# Enrichment columns in output order, mapped to MergedCompany fields.
ENRICHMENT_COLUMNS: dict[str, str] = {
    "Last Email Date": "last_email_date",
    "Last Meeting Date": "last_meeting_date",
    "Link to Salesforce Entry": "crm_account_link",
    "Salesforce Return String": "crm_account_owner",
    "Link to Affinity Entry": "crm_record_link",
    "Year Founded": "year_founded",
    "Company Linkedin": "linkedin_url",
    "Number of Employees": "employee_count",
    "Description": "description",
    "Country": "country",
    "Founders, CEO's Linkedin": "founder_linkedin_url",
    "Total Funding": "total_funding",
    "Last Funding": "last_funding_amount",
    "Last Funding Date": "last_funding_date",
    "Employee Growth Rate": "employee_growth_rate",
}

OUTPUT_COLUMNS: list[str] = [
    "ID",
    "Date Added",
    "Company Name",
    "Company Website",
    *ENRICHMENT_COLUMNS,
    "Original URL",
]


def read_input_records(buffer: bytes | str) -> list[InputRecord]:
    """
    Parse uploaded spreadsheet text into input records.

    Parameters:
        buffer (bytes | str): CSV content with at least a ``company_url`` column.

    Returns:
        list[InputRecord]: One record per data row, in file order. Rows with a
        blank URL are kept so the output has one row per input row.

    Raises:
        InputFormatError: If the content is not UTF-8 CSV with a ``company_url`` column.
    """
    if isinstance(buffer, bytes):
        try:
            text = buffer.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InputFormatError(f"Upload is not UTF-8 text: {e}") from e
    else:
        text = buffer.lstrip("\ufeff")

    reader = csv.DictReader(io.StringIO(text))
    try:
        fieldnames = [name.strip() for name in reader.fieldnames or []]
        if URL_COLUMN not in fieldnames:
            raise InputFormatError(
                f"Upload has no '{URL_COLUMN}' column (found: {fieldnames})"
            )
        reader.fieldnames = fieldnames
        records = [
            InputRecord(position=position, raw_url=(row.get(URL_COLUMN) or "").strip())
            for position, row in enumerate(reader)
        ]
    except csv.Error as e:
        raise InputFormatError(f"Upload is not valid CSV: {e}") from e

    logger.info(f"Read {len(records)} input rows")
    return records


def generate_row_id() -> str:
    return str(ULID())


class RowAssembler:
    """Projects merged companies and failures onto the fixed output schema."""

    def __init__(
        self,
        date_added: str | None = None,
        id_factory: Callable[[], str] = generate_row_id,
    ):
        self.date_added = date_added or datetime.now(UTC).date().isoformat()
        self._id_factory = id_factory

    def _row(self, record: InputRecord, values: dict[str, str]) -> OutputRow:
        return OutputRow(
            row_id=self._id_factory(),
            position=record.position,
            original_url=trim_url(record.raw_url),
            date_added=self.date_added,
            values=values,
        )

    def assemble(self, company: MergedCompany, record: InputRecord) -> OutputRow:
        values = {
            "Company Name": company.company_name,
            "Company Website": company.website,
        }
        for column, attribute in ENRICHMENT_COLUMNS.items():
            values[column] = getattr(company, attribute)
        return self._row(record, values)

    def assemble_failure(self, failure: DomainFailure, record: InputRecord) -> OutputRow:
        """Row for a failed domain: identifying fields kept, the rest error-marked."""
        values = {
            "Company Name": failure.domain,
            "Company Website": failure.domain,
        }
        for column in ENRICHMENT_COLUMNS:
            values[column] = ERROR_MARKER
        return self._row(record, values)


def serialize(rows: Iterable[OutputRow]) -> bytes:
    """
    Write rows as CSV in input order with every field quoted.

    Returns:
        bytes: UTF-8 encoded CSV including the header row.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for row in sorted(rows, key=lambda r: r.position):
        writer.writerow(
            [
                row.row_id,
                row.date_added,
                row.values.get("Company Name", ""),
                row.values.get("Company Website", ""),
                *(row.values.get(column, "") for column in ENRICHMENT_COLUMNS),
                row.original_url,
            ]
        )
    return output.getvalue().encode("utf-8")
