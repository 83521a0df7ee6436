import re


def normalize_document_number(value: str) -> str:
    """Keep only alphanumeric chars for document identifiers, uppercased."""
    return re.sub(r"[^A-Za-z0-9]", "", str(value or "").strip()).upper()


def normalize_person_name(value: str) -> str:
    """Trim and collapse repeated spaces."""
    return re.sub(r"\s+", " ", str(value or "").strip())


def normalize_phone(value: str) -> str:
    """Keep only digits."""
    return re.sub(r"\D", "", str(value or "").strip())


def normalize_plot_number(value: str) -> str:
    return str(value or "").strip()
