"""Plain-text recipient import: one ``Vorname:Nachname:Email`` per line"""

from dataclasses import dataclass, field
from typing import Iterable

from ...shared.validators import is_valid_email

FORMAT_ERROR = "Ungültiges Format. Erwartet: Vorname:Nachname:Email"
MISSING_FIELDS_ERROR = "Alle Felder sind erforderlich (Vorname, Nachname, Email)"
INVALID_EMAIL_ERROR = "Ungültige E-Mail-Adresse"
DUPLICATE_ERROR = "E-Mail-Adresse bereits vorhanden"


@dataclass
class ImportCandidate:
    line: int
    content: str
    first_name: str
    last_name: str
    email: str


@dataclass
class ImportLineError:
    line: int
    content: str
    error: str


@dataclass
class ParsedImport:
    candidates: list[ImportCandidate] = field(default_factory=list)
    errors: list[ImportLineError] = field(default_factory=list)
    duplicates: int = 0


def parse_recipient_lines(text: str, existing_emails: Iterable[str]) -> ParsedImport:
    """
    Split an import into insertable candidates and per-line errors.

    Blank lines are dropped before numbering. E-mails are compared
    case-insensitively against ``existing_emails`` and earlier lines.
    """
    seen = {email.lower() for email in existing_emails}
    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]

    result = ParsedImport()
    for number, line in enumerate(lines, start=1):
        parts = line.split(":")
        if len(parts) != 3:
            result.errors.append(ImportLineError(number, line, FORMAT_ERROR))
            continue

        first_name, last_name, email = (part.strip() for part in parts)
        if not first_name or not last_name or not email:
            result.errors.append(ImportLineError(number, line, MISSING_FIELDS_ERROR))
            continue

        if not is_valid_email(email):
            result.errors.append(ImportLineError(number, line, INVALID_EMAIL_ERROR))
            continue

        if email.lower() in seen:
            result.duplicates += 1
            result.errors.append(ImportLineError(number, line, DUPLICATE_ERROR))
            continue

        seen.add(email.lower())
        result.candidates.append(ImportCandidate(number, line, first_name, last_name, email))

    return result
