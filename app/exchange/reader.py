from io import BytesIO
from zipfile import BadZipFile

import structlog
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.exceptions import EmptyBatchError, FormatError
from app.exchange.fields import is_blank
from app.exchange.mapper import SourceRow

logger = structlog.get_logger()


def read_rows(content: bytes) -> list[SourceRow]:
    """Read the first worksheet of an .xlsx workbook into label-keyed rows.

    Row 1 supplies the labels. Blank cells are left out of each row and rows
    with no values at all are dropped. Blocking; call it off the event loop.
    """
    if not content:
        raise FormatError("uploaded file is empty")

    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise FormatError(f"file is not a readable workbook: {exc}") from exc

    try:
        sheet = workbook.worksheets[0]
        row_iter = sheet.iter_rows(values_only=True)
        header_row = next(row_iter, None)
        if header_row is None:
            raise EmptyBatchError()

        header_positions: list[tuple[int, str]] = []
        seen: set[str] = set()
        for idx, value in enumerate(header_row):
            if is_blank(value):
                continue
            label = str(value)
            if label in seen:
                logger.warning("workbook_duplicate_label", label=label, column=idx + 1)
                continue
            seen.add(label)
            header_positions.append((idx, label))

        rows: list[SourceRow] = []
        for values in row_iter:
            row = {
                label: values[idx]
                for idx, label in header_positions
                if idx < len(values) and not is_blank(values[idx])
            }
            if row:
                rows.append(row)
    finally:
        workbook.close()

    if not rows:
        raise EmptyBatchError()

    logger.debug("workbook_read", sheet=sheet.title, columns=len(header_positions), rows=len(rows))
    return rows
