import csv
import io
from typing import Any, Iterable, List, Mapping

from ..errors import ValidationError


def to_csv(headers: List[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """
    Header line then one line per row, every field double-quoted with
    embedded quotes doubled, lines joined by "\\n" (no trailing newline).
    Missing or None values become empty fields.
    """
    rows = list(rows)
    if not rows:
        raise ValidationError("No data to export")

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(h) is None else row.get(h) for h in headers])
    return buffer.getvalue()[:-1]
