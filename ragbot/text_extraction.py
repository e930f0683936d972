import csv
from typing import Dict, List, Tuple
from pypdf import PdfReader

from .errors import InputError

SUPPORTED_TYPES = ("pdf", "csv")


def read_text_from_pdf(file_path: str) -> str:
    pdf = PdfReader(file_path)
    parts = []
    for page in pdf.pages:
        parts.append(page.extract_text() or "")
    return "\n".join(parts)


def csv_to_text(rows: List[Dict[str, str]]) -> str:
    """
    Render parsed CSV rows as labeled text blocks.

    Example:
        CSV Data with columns: name, age

        Row 1:
        name: Alice
        age: 30
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    lines = [f"CSV Data with columns: {', '.join(headers)}", ""]

    for index, row in enumerate(rows, start=1):
        lines.append(f"Row {index}:")
        for header in headers:
            value = row.get(header)
            lines.append(f"{header}: {'' if value is None else value}")
        lines.append("")

    return "\n".join(lines) + "\n"


def read_text_from_csv(file_path: str, encoding="utf-8") -> str:
    with open(file_path, "r", encoding=encoding, errors="ignore", newline="") as f:
        rows = list(csv.DictReader(f))
    return csv_to_text(rows)


def file_type_for(filename: str) -> str:
    """Return 'pdf' or 'csv' from the extension, or raise InputError."""
    name = (filename or "").lower()
    for kind in SUPPORTED_TYPES:
        if name.endswith("." + kind):
            return kind
    raise InputError("Only PDF and CSV files are allowed")


def read_any(file_path: str, filename: str) -> Tuple[str, str]:
    kind = file_type_for(filename)
    if kind == "pdf":
        return read_text_from_pdf(file_path), kind
    return read_text_from_csv(file_path), kind
