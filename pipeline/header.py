# ===========================================
# header.py
# ===========================================

## \file header.py
## \brief Reads the three-line dataset header that precedes benchmark row data.
##
## \details
## Data files produced by the benchmark's data generator start with a header
## describing the tag set and the measured fields, followed by a blank line:
##
## \code
## tags,hostname,region,datacenter
## cpu,usage_user,usage_system,usage_idle
##
## <row data...>
## \endcode
##
## The first line always starts with the `tags` marker; the second line starts
## with the name of the measurement (hyper)table. parse_header() consumes
## exactly those three lines so that the shared stream is left positioned on the
## first byte of row data for the loader.

from dataclasses import dataclass

TAGS_MARKER = "tags"


class HeaderFormatError(ValueError):
    """!Raised when the input does not start with a well-formed header."""


@dataclass(frozen=True)
class HeaderDescriptor:
    """!Parsed dataset header.

    @param tag_line Tokens of the first line; `tag_line[0]` is the `tags` marker.
    @param column_line Tokens of the second line; `column_line[0]` is the table name.
    """

    tag_line: tuple
    column_line: tuple

    @property
    def tags(self) -> tuple:
        return self.tag_line[1:]

    @property
    def hypertable(self) -> str:
        return self.column_line[0]

    @property
    def fields(self) -> tuple:
        return self.column_line[1:]

    def validate(self):
        """!Checks the tag line marker.

        @throws HeaderFormatError If the tag line does not start with `tags`.
        """
        if self.tag_line[0] != TAGS_MARKER:
            raise HeaderFormatError(
                f"input header in wrong format. got '{self.tag_line[0]}', expected '{TAGS_MARKER}'"
            )


def _read_line(stream, lineno: int) -> str:
    raw = stream.readline()
    newline = b"\n" if isinstance(raw, bytes) else "\n"

    if not raw.endswith(newline):
        raise HeaderFormatError(
            f"input has wrong header format: unexpected end of stream on line {lineno}"
        )

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HeaderFormatError(f"input has wrong header format: {e}") from e

    return raw.strip()


def parse_header(stream) -> HeaderDescriptor:
    """!Reads the tag line, the column line and the blank separator line.

    @param stream A buffered stream with a `readline()` method (binary or text).

    @return A HeaderDescriptor holding the comma-split tokens of the first two lines.

    @throws HeaderFormatError If the stream ends early or the third line is not blank.
    """
    tags = _read_line(stream, 1)
    cols = _read_line(stream, 2)
    empty = _read_line(stream, 3)

    if empty:
        raise HeaderFormatError("input has wrong header format: third line is not blank")

    return HeaderDescriptor(tag_line=tuple(tags.split(",")), column_line=tuple(cols.split(",")))
