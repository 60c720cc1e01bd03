"""
Supports writing results files.

Writers emit the rows of a ResultView in the order given; they never
re-sort.  Each output begins with (or, for JSON lines, repeats in every
record) the fixed field names of the view.

"""

from collections import OrderedDict
from contextlib import contextmanager
from datetime import datetime
import json
import logging
import sys

try:
    import xlsxwriter
except ImportError:
    raise Exception("XlsxWriter does not seem to be installed. "
                    "Please follow the setup instructions.")

from pyridings.standings import format_ratio, round_ratio
from pyridings.utils import replacing_path, time_it


WRITER_DELIMITER = "\t"
WORKSHEET_NAME = "Results"
RATIO_FIELD = "ratio"

log = logging.getLogger(__name__)


def format_tsv_value(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ResultsWriter(object):

    """
    Base class for writers.

    Subclasses provide writer(), a context manager that opens the
    output, plus write_header() and write_record().

    """

    def __init__(self, path=None, now=None):
        """
        Arguments:
          path: the output path, or None for stdout where supported.
          now: the creation time recorded by formats that store one.

        """
        if now is None:
            now = datetime.now()
        self.path = path
        self.now = now

    @property
    def target(self):
        return "<stdout>" if self.path is None else self.path

    def write(self, view):
        with time_it("writing %s output: %s" % (self.name, self.target)):
            with self.writer():
                self.write_header(view.fields)
                for row in view.rows:
                    self.write_record(view.fields, row)
        log.info("wrote: %d records" % len(view.rows))


class TextMixin(object):

    """Opens a UTF-8 text file, or uses stdout when there is no path."""

    @contextmanager
    def writer(self):
        if self.path is None:
            self.file = sys.stdout
            yield
            self.file.flush()
            return
        with replacing_path(self.path) as temp_path:
            with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
                self.file = f
                yield

    def write_ln(self, s=""):
        print(s, file=self.file)


class TSVWriter(TextMixin, ResultsWriter):

    name = "TSV"

    def write_row(self, values):
        self.write_ln(WRITER_DELIMITER.join([format_tsv_value(v) for v in values]))

    def write_header(self, fields):
        self.write_row(fields)

    def write_record(self, fields, row):
        values = [format_ratio(value) if field == RATIO_FIELD else value
                  for field, value in zip(fields, row)]
        self.write_row(values)


class JSONLinesWriter(TextMixin, ResultsWriter):

    name = "JSON lines"

    def write_header(self, fields):
        pass

    def write_record(self, fields, row):
        record = OrderedDict()
        for field, value in zip(fields, row):
            if field == RATIO_FIELD:
                value = round_ratio(value)
            record[field] = value
        self.write_ln(json.dumps(record, ensure_ascii=False))


class ExcelWriter(ResultsWriter):

    name = "Excel"

    row_index = 0

    def __init__(self, path, now=None):
        if path is None:
            raise ValueError("Excel output requires an output path")
        super().__init__(path, now=now)

    @contextmanager
    def writer(self):
        with replacing_path(self.path) as temp_path:
            workbook = xlsxwriter.Workbook(temp_path)
            # Recording a fixed creation time keeps repeated runs identical.
            workbook.set_properties({"created": self.now})
            self.workbook = workbook
            self.worksheet = workbook.add_worksheet(WORKSHEET_NAME)
            self.header_format = workbook.add_format({"bold": True})
            self.ratio_format = workbook.add_format({"num_format": "0.0000"})
            self.row_index = 0
            yield
            workbook.close()

    def write_header(self, fields):
        self.worksheet.write_row(self.row_index, 0, fields, self.header_format)
        self.row_index += 1

    def write_record(self, fields, row):
        worksheet = self.worksheet
        for column, (field, value) in enumerate(zip(fields, row)):
            if value is None:
                # Leave null cells empty.
                continue
            if field == RATIO_FIELD:
                worksheet.write_number(self.row_index, column, value, self.ratio_format)
            else:
                worksheet.write(self.row_index, column, value)
        self.row_index += 1


WRITERS = {
    "tsv": TSVWriter,
    "jsonl": JSONLinesWriter,
    "xlsx": ExcelWriter,
}


def make_writer(format_name, path=None, now=None):
    try:
        writer_cls = WRITERS[format_name]
    except KeyError:
        raise ValueError("unknown output format: %r" % format_name)
    return writer_cls(path, now=now)
