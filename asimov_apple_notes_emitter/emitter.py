import json

from .errors import WriteFailure


def encode_record(record):
    return json.dumps(
        record.as_json_ld(), ensure_ascii=False, separators=(",", ":")
    ).encode("utf8")


def emit_records(records, stream):
    """
    Write each record to a binary stream as one line of JSON

    The stream is flushed after every line, so a failure while writing a
    record never leaves earlier records incomplete. Returns the number of
    records written.
    """
    count = 0
    for record in records:
        line = encode_record(record) + b"\n"
        try:
            stream.write(line)
            stream.flush()
        except OSError as ex:
            raise WriteFailure(
                f"Could not write note {record.id} to output: {ex}"
            ) from ex
        count += 1
    return count
