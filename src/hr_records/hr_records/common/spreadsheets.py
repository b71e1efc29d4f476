from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Iterable, Sequence

import pandas as pd

from ..core.exceptions import ValidationError

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def write_xlsx(rows: Iterable[dict], *, columns: Sequence[tuple[str, str]], sheet_name: str) -> bytes:
    """Render rows into an .xlsx byte stream.

    ``columns`` maps row keys to header labels, in display order.
    """

    keys = [key for key, _ in columns]
    df = pd.DataFrame([{k: r.get(k) for k in keys} for r in rows], columns=keys)
    df = df.rename(columns=dict(columns))

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()


def read_table(stream: IO[bytes], filename: str) -> list[dict]:
    """Read a .csv or .xlsx upload into a list of row dicts (blank cells dropped)."""

    suffix = Path(filename or "").suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(stream, dtype=str)
        elif suffix in {".xlsx", ".xls"}:
            df = pd.read_excel(stream, dtype=str)
        else:
            raise ValidationError("Unsupported file type (expected .csv or .xlsx)")
    except ValidationError:
        raise
    except Exception as e:
        raise ValidationError(f"Could not read spreadsheet: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    rows: list[dict] = []
    for record in df.to_dict(orient="records"):
        rows.append({k: str(v).strip() for k, v in record.items() if isinstance(v, str) and v.strip()})
    return rows
