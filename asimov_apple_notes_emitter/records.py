from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .text import DEFAULT_WRAP_WIDTH, html_to_text

URN_PREFIX = "urn:apple:notes:note:"
RECORD_TYPE = "CreativeWork"
RECORD_SOURCE = "apple-notes"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


@dataclass(frozen=True)
class RawNote:
    id: str
    title: Optional[str]
    html: Optional[str]
    folder: Optional[str]
    account: Optional[str]
    created: datetime
    modified: datetime


@dataclass(frozen=True)
class OutputRecord:
    id: str
    name: str
    text: str
    date_created: str
    date_modified: str
    is_part_of: str
    account: str
    type: str = RECORD_TYPE
    source: str = RECORD_SOURCE

    def as_json_ld(self) -> dict:
        return {
            "@type": self.type,
            "@id": self.id,
            "name": self.name,
            "text": self.text,
            "dateCreated": self.date_created,
            "dateModified": self.date_modified,
            "isPartOf": self.is_part_of,
            "account": self.account,
            "source": self.source,
        }


def build_urn(identifier: str) -> str:
    if not identifier:
        raise ValueError("A note identifier is required to build its URN")
    return f"{URN_PREFIX}{identifier}"


def format_timestamp(value: datetime) -> str:
    "Render as 'YYYY-MM-DD HH:MM:SS +HHMM', treating naive values as UTC"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def assemble_record(note: RawNote, wrap_width: int = DEFAULT_WRAP_WIDTH) -> OutputRecord:
    return OutputRecord(
        id=build_urn(note.id),
        name=note.title or "",
        text=html_to_text(note.html or "", wrap_width),
        date_created=format_timestamp(note.created),
        date_modified=format_timestamp(note.modified),
        is_part_of=note.folder or "",
        account=note.account or "",
    )
