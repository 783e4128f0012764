from asimov_apple_notes_emitter.records import (
    RawNote,
    assemble_record,
    build_urn,
    format_timestamp,
)
from datetime import datetime, timedelta, timezone
import pytest

SHOPPING_LIST = RawNote(
    id="12345-ABCDE",
    title="Shopping List",
    html="<p>Milk</p><p>Eggs</p><p>Bread</p>",
    folder="Personal",
    account="iCloud",
    created=datetime(2025, 1, 20, 13, 30, tzinfo=timezone.utc),
    modified=datetime(2025, 1, 20, 14, 10, tzinfo=timezone.utc),
)


def test_build_urn():
    assert build_urn("12345-ABCDE") == "urn:apple:notes:note:12345-ABCDE"
    assert build_urn("12345-ABCDE") == build_urn("12345-ABCDE")
    ids = [
        "x-coredata://ABC/ICNote/p1",
        "x-coredata://ABC/ICNote/p10",
        "p1",
        "P1",
        "p1 ",
    ]
    assert len({build_urn(identifier) for identifier in ids}) == len(ids)


def test_build_urn_requires_identifier():
    with pytest.raises(ValueError):
        build_urn("")


@pytest.mark.parametrize(
    "value,expected",
    (
        (datetime(2025, 1, 20, 13, 30, tzinfo=timezone.utc), "2025-01-20 13:30:00 +0000"),
        (
            datetime(2024, 7, 4, 9, 5, 7, tzinfo=timezone(timedelta(hours=2))),
            "2024-07-04 09:05:07 +0200",
        ),
        (
            datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone(-timedelta(hours=5, minutes=30))),
            "2024-12-31 23:59:59 -0530",
        ),
        (datetime(2025, 3, 1, 8, 0), "2025-03-01 08:00:00 +0000"),
    ),
)
def test_format_timestamp(value, expected):
    assert format_timestamp(value) == expected


def test_assemble_record():
    record = assemble_record(SHOPPING_LIST)
    assert record.as_json_ld() == {
        "@type": "CreativeWork",
        "@id": "urn:apple:notes:note:12345-ABCDE",
        "name": "Shopping List",
        "text": "Milk\nEggs\nBread",
        "dateCreated": "2025-01-20 13:30:00 +0000",
        "dateModified": "2025-01-20 14:10:00 +0000",
        "isPartOf": "Personal",
        "account": "iCloud",
        "source": "apple-notes",
    }
    assert list(record.as_json_ld()) == [
        "@type",
        "@id",
        "name",
        "text",
        "dateCreated",
        "dateModified",
        "isPartOf",
        "account",
        "source",
    ]


def test_assemble_record_missing_fields():
    note = RawNote(
        id="p7",
        title=None,
        html=None,
        folder=None,
        account=None,
        created=SHOPPING_LIST.created,
        modified=SHOPPING_LIST.modified,
    )
    record = assemble_record(note)
    assert (record.name, record.text, record.is_part_of, record.account) == (
        "",
        "",
        "",
        "",
    )


def test_assemble_record_wrap_width():
    note = RawNote(
        id="p8",
        title="Long",
        html="<p>" + " ".join(["word"] * 30) + "</p>",
        folder="Notes",
        account="iCloud",
        created=SHOPPING_LIST.created,
        modified=SHOPPING_LIST.modified,
    )
    assert "\n" not in assemble_record(note, wrap_width=0).text
    assert all(
        len(line) <= 24 for line in assemble_record(note, wrap_width=24).text.split("\n")
    )
