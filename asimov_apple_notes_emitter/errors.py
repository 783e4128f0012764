import click

# BSD sysexits.h
EX_DATAERR = 65
EX_UNAVAILABLE = 69
EX_IOERR = 74


class NoteParseError(click.ClickException):
    "A note block from Notes.app could not be parsed"

    exit_code = EX_DATAERR


class SourceUnavailable(click.ClickException):
    "Notes could not be read from Notes.app"

    exit_code = EX_UNAVAILABLE


class WriteFailure(click.ClickException):
    "The output stream stopped accepting records"

    exit_code = EX_IOERR
