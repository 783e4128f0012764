import click
import itertools
import secrets
import subprocess
import sys
from datetime import datetime

from .emitter import emit_records
from .errors import NoteParseError, SourceUnavailable
from .records import RawNote, assemble_record
from .text import DEFAULT_WRAP_WIDTH

COUNT_SCRIPT = """
tell application "Notes"
    set noteCount to count of notes
end tell
log noteCount
"""

EXTRACT_SCRIPT = """
tell application "Notes"
   repeat with eachAccount in every account
      set accountName to the name of eachAccount
      repeat with eachFolder in every folder of eachAccount
         set folderName to the name of eachFolder
         repeat with eachNote in every note of eachFolder
            set noteId to the id of eachNote
            set noteTitle to the name of eachNote
            set noteBody to the body of eachNote
            set noteCreatedDate to the creation date of eachNote
            set noteCreated to (noteCreatedDate as «class isot» as string)
            set noteUpdatedDate to the modification date of eachNote
            set noteUpdated to (noteUpdatedDate as «class isot» as string)
            log "{split}-id: " & noteId & "\n"
            log "{split}-created: " & noteCreated & "\n"
            log "{split}-updated: " & noteUpdated & "\n"
            log "{split}-account: " & accountName & "\n"
            log "{split}-folder: " & folderName & "\n"
            log "{split}-title: " & noteTitle & "\n\n"
            log noteBody & "\n"
            log "{split}{split}" & "\n"
         end repeat
      end repeat
   end repeat
end tell
""".strip()

NOTE_KEYS = ("id", "title", "account", "folder", "created", "updated")


@click.command()
@click.version_option()
@click.option(
    "-w",
    "--wrap-width",
    type=click.IntRange(min=0),
    default=DEFAULT_WRAP_WIDTH,
    show_default=True,
    envvar="ASIMOV_APPLE_NOTES_WRAP_WIDTH",
    help="Wrap width for plain-text conversion from HTML, 0 to disable",
)
@click.option("--folder", help="Only emit notes in this folder")
@click.option("--account", help="Only emit notes in this account")
@click.option("--stop-after", type=click.IntRange(min=0), help="Stop after this many notes")
@click.option("-v", "--verbose", is_flag=True, help="Report progress on stderr")
def cli(wrap_width, folder, account, stop_after, verbose):
    """
    Emit Apple Notes as JSON Lines

    Example usage:

        asimov-apple-notes-emitter --wrap-width 100 > notes.jsonl

    Each line of output is a JSON object describing one note: its title,
    plain text, timestamps, folder, account and a stable URN.
    """
    if verbose:
        click.echo("Counting notes…", err=True)
        click.echo(f"Found {count_notes()} notes", err=True)
    click.echo("Fetching notes from Notes…", err=True)
    notes = extract_notes()
    if folder is not None:
        notes = (note for note in notes if note.folder == folder)
    if account is not None:
        notes = (note for note in notes if note.account == account)
    if stop_after:
        notes = itertools.islice(notes, stop_after)
    if verbose:
        notes = log_notes(notes)
    records = (assemble_record(note, wrap_width) for note in notes)
    count = emit_records(records, sys.stdout.buffer)
    if verbose:
        click.echo(f"Emitted {count} notes", err=True)


def log_notes(notes):
    for note in notes:
        click.echo(
            f"Emitting {note.id} ({note.account or '-'} / {note.folder or '-'}): "
            f"{note.title}",
            err=True,
        )
        yield note


def count_notes():
    try:
        output = subprocess.check_output(
            ["osascript", "-e", COUNT_SCRIPT], stderr=subprocess.STDOUT
        )
    except (OSError, subprocess.CalledProcessError) as ex:
        raise SourceUnavailable(f"Could not count notes: {ex}") from ex
    return int(output.decode("utf8").strip())


def iter_process_lines(process):
    if process.stdout is None:
        return
    for line in process.stdout:
        yield line
    process.wait()


def parse_timestamp(value):
    "Attach the local UTC offset in effect on that date to a naive timestamp"
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    return timestamp


def build_note(fields, body):
    try:
        created = parse_timestamp(fields["created"])
        modified = parse_timestamp(fields["updated"])
    except KeyError as ex:
        raise NoteParseError(
            f"Note {fields['id']} is missing its {ex.args[0]} field"
        ) from ex
    except ValueError as ex:
        raise NoteParseError(f"Note {fields['id']} has a bad timestamp: {ex}") from ex
    return RawNote(
        id=fields["id"],
        title=fields.get("title"),
        html="\n".join(body).strip(),
        folder=fields.get("folder"),
        account=fields.get("account"),
        created=created,
        modified=modified,
    )


def extract_notes():
    """
    Yield a RawNote for every note in every folder of every account

    Notes.app is driven through osascript; the script's log output is
    parsed line by line as it arrives. Raises SourceUnavailable if osascript
    cannot be started or exits with an error.
    """
    split = secrets.token_hex(8)
    try:
        process = subprocess.Popen(
            ["osascript", "-e", EXTRACT_SCRIPT.format(split=split)],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as ex:
        raise SourceUnavailable(f"Could not run osascript: {ex}") from ex
    fields = {}
    body = []
    for line in iter_process_lines(process):
        line = line.decode("utf8", errors="replace").strip()
        if line == f"{split}{split}":
            if fields.get("id"):
                yield build_note(fields, body)
            fields = {}
            body = []
            continue
        for key in NOTE_KEYS:
            # Empty values lose their trailing space to strip()
            if line.startswith(f"{split}-{key}:"):
                fields[key] = line[len(f"{split}-{key}:") :].strip()
                break
        else:
            body.append(line)
    if process.returncode:
        message = "\n".join(body).strip()
        raise SourceUnavailable(
            "Failed to talk to Apple Notes (osascript exited with status {}){}".format(
                process.returncode, f": {message}" if message else ""
            )
        )
