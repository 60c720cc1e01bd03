"""
Parses poll-by-poll results files into PollRecord values.

Each results file covers one province or territory and contains one row
per candidate per polling division.  Files must already be UTF-8; older
Latin-1 datasets are converted before they reach this module.

"""

from collections import namedtuple
import csv
import logging
import re

from pyridings.errors import InputReadError, LoadError, ParseError


# Also accepts a leading byte order mark.
FILE_ENCODING = "utf-8-sig"

# Undecodable bytes are read as lone surrogates so that they can be
# reported with the row that contains them.
FILE_ERRORS = "surrogateescape"

# Plain ASCII digits only: int() would also accept "+5", "1_000" and
# non-ASCII digits.
VOTES_PATTERN = re.compile(r"-?[0-9]+")

# The value of the void-poll and no-poll-held indicator columns for an
# excluded poll.
INDICATOR_YES = "Y"

PollRecord = namedtuple("PollRecord", ("riding_id", "riding", "poll", "last_name",
                                       "first_name", "party", "votes", "excluded"))

LoaderConfig = namedtuple("LoaderConfig", ("delimiter", "has_header"))
LoaderConfig.__new__.__defaults__ = (",", True)


log = logging.getLogger("pyridings")


class ColumnLayout(object):

    """
    Describes where the PollRecord fields live in a row.

    Column positions are 0-based.  A riding_id of None means that the
    riding name doubles as its identifier.

    Attributes:
      flag_columns: columns whose value INDICATOR_YES marks an excluded poll.
      merge_column: column that is non-empty when the poll was merged
        into another poll (its votes are reported with that poll).
      vote_markers: magic values of the votes column that mark an
        excluded poll in formats lacking indicator columns.

    """

    def __init__(self, name, field_count, riding, poll, last_name, first_name,
                 party, votes, riding_id=None, alt_party=None, flag_columns=(),
                 merge_column=None, vote_markers=()):
        self.name = name
        self.field_count = field_count
        self.riding_id = riding_id
        self.riding = riding
        self.poll = poll
        self.last_name = last_name
        self.first_name = first_name
        self.party = party
        self.alt_party = alt_party
        self.votes = votes
        self.flag_columns = flag_columns
        self.merge_column = merge_column
        self.vote_markers = vote_markers

    def __repr__(self):
        return "<ColumnLayout object: name=%r, %d fields>" % (self.name, self.field_count)

    def is_excluded(self, row):
        for column in self.flag_columns:
            if row[column].strip().upper() == INDICATOR_YES:
                return True
        if self.merge_column is not None and row[self.merge_column].strip():
            return True
        return row[self.votes].strip() in self.vote_markers


# The Elections Canada poll-by-poll format (2008 onward), for example:
#
#   10001,"Avalon","Avalon"," 1","Freshwater",N,N,"",0,121,"Chapman","",
#   "Matthew","Conservative","Conservateur",N,N,33
#
# Columns: riding number, riding name (English, French), poll number,
# poll name, void poll indicator, no poll held indicator, merge with,
# rejected ballots, electors, family name, middle name, first name,
# party (English, French), incumbent indicator, elected indicator, votes.
POLL_BY_POLL = ColumnLayout(
    name="pollbypoll",
    field_count=18,
    riding_id=0,
    riding=1,
    poll=3,
    last_name=10,
    first_name=12,
    party=13,
    alt_party=14,
    votes=17,
    flag_columns=(5, 6),
    merge_column=7,
)

# A reduced format used by hand-assembled datasets:
#
#   riding, poll, family name, first name, party, votes
#
# where the votes column holds M (merged), C (cancelled) or N (no poll)
# for an excluded poll.
COMPACT = ColumnLayout(
    name="compact",
    field_count=6,
    riding=0,
    poll=1,
    last_name=2,
    first_name=3,
    party=4,
    votes=5,
    vote_markers=("M", "C", "N"),
)

LAYOUTS = {layout.name: layout for layout in (POLL_BY_POLL, COMPACT)}


def get_layout(name):
    try:
        return LAYOUTS[name]
    except KeyError:
        raise LoadError("unknown column layout: %r (expected one of: %s)" %
                        (name, ", ".join(sorted(LAYOUTS))))


def parse_votes(value):
    """Parse a vote count, which must be a non-negative integer."""
    text = value.strip()
    if VOTES_PATTERN.fullmatch(text) is None:
        raise ParseError("vote count is not an integer: %r" % value)
    votes = int(text)
    if votes < 0:
        raise ParseError("vote count is negative: %r" % value)
    return votes


def check_encoding(row, path, line_no):
    """Raise a ParseError if a row read with FILE_ERRORS held bad bytes."""
    for value in row:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as err:
            bad_byte = ord(value[err.start]) - 0xDC00
            raise ParseError("input is not UTF-8: invalid byte 0x%02x" % bad_byte,
                             path=path, line_no=line_no)


class PollParser(object):

    """
    Turns the rows of a results file into PollRecord values.

    """

    def __init__(self, layout, parties):
        """
        Arguments:
          layout: a ColumnLayout object.
          parties: a PartyTable object.

        """
        self.layout = layout
        self.parties = parties

    def parse_party(self, row):
        layout = self.layout
        raw_name = row[layout.party].strip()
        if not raw_name and layout.alt_party is not None:
            raw_name = row[layout.alt_party].strip()
        return self.parties.resolve(raw_name)

    def parse_row(self, row):
        layout = self.layout
        if len(row) != layout.field_count:
            raise ParseError("expected %d fields but found %d" % (layout.field_count, len(row)))

        excluded = layout.is_excluded(row)
        votes_value = row[layout.votes]
        if excluded and votes_value.strip() in layout.vote_markers:
            votes = 0
        else:
            votes = parse_votes(votes_value)

        riding = row[layout.riding].strip()
        if layout.riding_id is None:
            riding_id = riding
        else:
            riding_id = row[layout.riding_id].strip()
        if not riding_id:
            raise ParseError("missing riding")

        return PollRecord(
            riding_id=riding_id,
            riding=riding,
            poll=row[layout.poll].strip(),
            last_name=row[layout.last_name].strip(),
            first_name=row[layout.first_name].strip(),
            party=self.parse_party(row),
            votes=votes,
            excluded=excluded,
        )


class PollSource(object):

    """
    A restartable, lazy sequence of the PollRecord values in one file.

    Each iteration reopens the file, so records are never all held in
    memory at once.  Errors carry the path and line number of the row.

    """

    def __init__(self, path, parties, layout=POLL_BY_POLL, config=None):
        if config is None:
            config = LoaderConfig()
        self.path = path
        self.config = config
        self.parser = PollParser(layout, parties)

    def __repr__(self):
        return "<PollSource object: path=%r, layout=%r>" % (self.path, self.parser.layout.name)

    def open(self):
        try:
            return open(self.path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="")
        except OSError as err:
            raise InputReadError("cannot open input: %s" % err.strerror, path=self.path)

    def iter_rows(self, f):
        """
        Yield 2-tuples of (line_no, row), skipping the header and blank rows.

        """
        reader = csv.reader(f, delimiter=self.config.delimiter)
        line_no = 0
        skip_header = self.config.has_header
        try:
            for row in reader:
                # The reader's line count includes quoted newlines, so
                # record the line the row started on.
                start_line_no = line_no + 1
                line_no = reader.line_num
                check_encoding(row, self.path, start_line_no)
                if not row or not any(value.strip() for value in row):
                    continue
                if skip_header:
                    skip_header = False
                    continue
                yield start_line_no, row
        except csv.Error as err:
            raise ParseError("malformed row: %s" % err, path=self.path, line_no=line_no + 1)

    def __iter__(self):
        log.info("opening: %s" % self.path)
        parse_row = self.parser.parse_row
        row_count = 0
        with self.open() as f:
            for line_no, row in self.iter_rows(f):
                try:
                    record = parse_row(row)
                except LoadError as err:
                    raise err.locate(self.path, line_no)
                row_count += 1
                yield record
        log.info("parsed: %d rows from %s" % (row_count, self.path))


def make_sources(paths, parties, layout=POLL_BY_POLL, config=None):
    """Return a list of PollSource objects, one per input path."""
    return [PollSource(path, parties, layout=layout, config=config) for path in paths]


def iter_poll_records(sources):
    """Yield the records of each source in turn."""
    for source in sources:
        yield from source
