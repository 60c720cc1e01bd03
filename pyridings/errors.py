"""
Defines the errors that abort a run.

Every error is fatal: the command-line entry point catches RidingsError,
logs the diagnostic, and exits with a non-zero status.

"""


class RidingsError(Exception):

    """Base class for all errors raised by this package."""


class LoadError(RidingsError):

    """
    Raised when an input source cannot be turned into poll records.

    Attributes:
      msg: description of the problem.
      path: the input file, once known.
      line_no: the 1-based line number in the input file, once known.

    """

    def __init__(self, msg, path=None, line_no=None):
        super().__init__(msg)
        self.msg = msg
        self.path = path
        self.line_no = line_no

    def locate(self, path, line_no=None):
        """Attach the input position, unless one was already attached."""
        if self.path is None:
            self.path = path
            self.line_no = line_no
        return self

    def __str__(self):
        if self.path is None:
            return self.msg
        if self.line_no is None:
            return "%s: %s" % (self.path, self.msg)
        return "%s:%d: %s" % (self.path, self.line_no, self.msg)


class InputReadError(LoadError):

    """A declared input source is missing or unreadable."""


class ParseError(LoadError):

    """A row violates the expected tabular shape or has a bad vote count."""


class UnknownPartyError(LoadError):

    """A party name has no entry in the party normalization table."""

    def __init__(self, raw_name, path=None, line_no=None):
        msg = "unknown party name: %r" % raw_name
        super().__init__(msg, path=path, line_no=line_no)
        self.raw_name = raw_name


class QueryError(RidingsError):

    """A requested view cannot be produced (e.g. an unknown party code)."""
