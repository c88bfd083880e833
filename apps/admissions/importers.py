# admissions/importers.py

"""
Lead bulk import readers.

Both readers yield ``(row_number, {header: value})`` pairs, where
row_number is the 1-based spreadsheet row (the header is row 1).
"""

import csv
import io
import logging

from openpyxl import load_workbook

from utils.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ('Name', 'Phone', 'Email', 'InterestedCourse', 'Source')


def _check_headers(headers):
    missing = [h for h in REQUIRED_HEADERS if h not in headers]
    if missing:
        raise ValidationFailed(
            f"Headers must be {','.join(REQUIRED_HEADERS)} (missing: {', '.join(missing)})",
            code='HEADER_MISSING',
        )


def _clean(value):
    if value is None:
        return ''
    return str(value).strip()


def read_csv_rows(text):
    """Read rows from CSV text with a header line."""
    reader = csv.reader(io.StringIO(text))
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if len(rows) <= 1:
        raise ValidationFailed('No data rows', code='NO_ROWS')

    headers = [h.strip() for h in rows[0]]
    _check_headers(headers)

    for offset, row in enumerate(rows[1:], start=2):
        yield offset, {
            header: _clean(row[i]) if i < len(row) else ''
            for i, header in enumerate(headers) if header
        }


def read_xlsx_rows(upload):
    """Read rows from the first worksheet of an .xlsx upload."""
    try:
        workbook = load_workbook(upload, read_only=True, data_only=True)
    except Exception as e:
        logger.warning(f"Unreadable lead workbook: {e}")
        raise ValidationFailed('Upload is not a readable .xlsx workbook')

    try:
        sheet = workbook.worksheets[0]
        rows = [
            row for row in sheet.iter_rows(values_only=True)
            if any(_clean(cell) for cell in row)
        ]
    finally:
        workbook.close()

    if len(rows) <= 1:
        raise ValidationFailed('No data rows', code='NO_ROWS')

    headers = [_clean(h) for h in rows[0]]
    _check_headers(headers)

    for offset, row in enumerate(rows[1:], start=2):
        yield offset, {
            header: _clean(row[i]) if i < len(row) else ''
            for i, header in enumerate(headers) if header
        }
