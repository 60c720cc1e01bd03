from pathlib import Path
import os
import shutil
import tempfile
import unittest

from pyridings.errors import InputReadError, ParseError, QueryError, UnknownPartyError
from pyridings.loading import LoaderConfig
from pyridings.main import convert, parse_args, query_results
from pyridings.queries import MODE_BY_PARTY, MODE_TOTALS, Selection
from pyridings.run import __doc__ as RUN_DOC


TEST_DIR = Path(__file__).parents[1] / "test_data"
POLL_BY_POLL_DIR = TEST_DIR / "pollbypoll"
COMPACT_DIR = TEST_DIR / "compact"


class EndToEndTest(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.output_path = os.path.join(self.temp_dir.name, "output.txt")

    def assert_files_equal(self, actual_file, expected_file):
        line_no = 0
        for line_no, (line1, line2) in enumerate(zip(actual_file, expected_file), start=1):
            self.assertEqual(line1, line2, msg=("at line %d in actual and expected files, respectively" % line_no))
        # Check that neither file has lines remaining.
        for f, name in ((actual_file, "actual"), (expected_file, "expected")):
            msg = "%r file has more lines than the other starting at line %d" % (name, line_no + 1)
            with self.assertRaises(StopIteration, msg=msg):
                next(f)

    def check_end_to_end(self, paths, selection, expected_path, format_name="tsv", **kwargs):
        convert([str(path) for path in paths], selection, output_path=self.output_path,
                format_name=format_name, **kwargs)

        def read(path):
            return open(path, "r", encoding="utf-8")

        with read(self.output_path) as actual_file, read(expected_path) as expected_file:
            self.assert_files_equal(actual_file, expected_file)

    def test_end_to_end__totals(self):
        self.check_end_to_end([POLL_BY_POLL_DIR / "input"], Selection(MODE_TOTALS),
                              POLL_BY_POLL_DIR / "expected_totals.tsv")

    def test_end_to_end__totals_serial(self):
        self.check_end_to_end([POLL_BY_POLL_DIR / "input"], Selection(MODE_TOTALS),
                              POLL_BY_POLL_DIR / "expected_totals.tsv", max_workers=1)

    def test_end_to_end__by_party(self):
        self.check_end_to_end([POLL_BY_POLL_DIR / "input"], Selection(MODE_BY_PARTY, "LIB"),
                              POLL_BY_POLL_DIR / "expected_by_party_lib.tsv")

    def test_end_to_end__compact_jsonl(self):
        config = LoaderConfig(delimiter="\t", has_header=False)
        self.check_end_to_end([COMPACT_DIR / "results.tsv"], Selection(MODE_TOTALS),
                              COMPACT_DIR / "expected_totals.jsonl", format_name="jsonl",
                              layout_name="compact", config=config)

    def test_file_order(self):
        """Check that the order of the input files does not change the output."""
        input_dir = POLL_BY_POLL_DIR / "input"
        paths = sorted(str(path) for path in input_dir.glob("*.csv"))
        selection = Selection(MODE_BY_PARTY, "CON")
        forward = query_results(paths, selection)
        backward = query_results(list(reversed(paths)), selection)
        self.assertEqual(forward, backward)

    def test_idempotent(self):
        """Check that running twice on the same input gives identical bytes."""
        outputs = []
        for i in range(2):
            path = os.path.join(self.temp_dir.name, "run%d.tsv" % i)
            convert([str(POLL_BY_POLL_DIR / "input")], Selection(MODE_TOTALS), output_path=path)
            with open(path, "rb") as f:
                outputs.append(f.read())
        self.assertEqual(outputs[0], outputs[1])

    def test_reverse(self):
        selection = Selection(MODE_BY_PARTY, "LIB")
        paths = [str(POLL_BY_POLL_DIR / "input")]
        view = query_results(paths, selection)
        reversed_view = query_results(paths, selection, reverse=True)
        self.assertEqual(reversed_view.rows, list(reversed(view.rows)))
        self.assertEqual(reversed_view.rows[0].last_name, "MacAulay")

    def test_tied_riding(self):
        view = query_results([str(POLL_BY_POLL_DIR / "input")], Selection(MODE_BY_PARTY, "CON"))
        greene, = [row for row in view.rows if row.last_name == "Greene"]
        self.assertEqual((greene.votes, greene.won), (100, False))


class FailureTest(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.input_dir = os.path.join(self.temp_dir.name, "input")
        shutil.copytree(str(POLL_BY_POLL_DIR / "input"), self.input_dir)
        self.output_path = os.path.join(self.temp_dir.name, "output.tsv")

    def append_line(self, line):
        path = os.path.join(self.input_dir, "pollbypoll_11.csv")
        with open(path, "a", encoding="utf-8") as f:
            f.write(line)
        return path

    def check_no_output(self, error_class, selection=Selection(MODE_TOTALS)):
        with self.assertRaises(error_class) as cm:
            convert([self.input_dir], selection, output_path=self.output_path)
        self.assertFalse(os.path.exists(self.output_path))
        return cm.exception

    def test_unknown_party(self):
        path = self.append_line('11001,"Cardigan","Cardigan"," 3","Georgetown",N,N,"",0,99,'
                                '"Doe","","Jane","Whig Party","Parti Whig",N,N,4\n')
        err = self.check_no_output(UnknownPartyError)
        self.assertEqual((err.path, err.line_no), (path, 12))

    def test_bad_votes(self):
        path = self.append_line('11001,"Cardigan","Cardigan"," 3","Georgetown",N,N,"",0,99,'
                                '"Lantz","","Wayne","Conservative","Conservateur",N,N,-4\n')
        err = self.check_no_output(ParseError)
        self.assertIn("%s:12:" % path, str(err))

    def test_missing_input(self):
        missing = os.path.join(self.temp_dir.name, "missing.csv")
        with self.assertRaises(InputReadError):
            convert([missing], Selection(MODE_TOTALS), output_path=self.output_path)
        self.assertFalse(os.path.exists(self.output_path))

    def test_unknown_party_code(self):
        self.check_no_output(QueryError, Selection(MODE_BY_PARTY, "XYZ"))

    def test_known_party_without_candidates(self):
        convert([self.input_dir], Selection(MODE_BY_PARTY, "BLQ"), output_path=self.output_path)
        with open(self.output_path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "riding\tparty\tlast_name\tfirst_name\tvotes\tratio\twon\n")


class ParseArgsTest(unittest.TestCase):

    def parse(self, *args):
        return parse_args(RUN_DOC, ["riding-results"] + list(args))

    def test_defaults(self):
        args = self.parse("data")
        self.assertEqual(args.paths, ["data"])
        self.assertEqual(args.mode, MODE_TOTALS)
        self.assertEqual((args.delimiter, args.has_header), (",", True))
        self.assertEqual((args.format_name, args.output, args.workers), ("tsv", None, None))

    def test_by_party(self):
        args = self.parse("--mode", "by-party", "--party", "GRN", "--won-only", "--reverse", "a.csv")
        self.assertEqual((args.mode, args.party_code, args.won_only, args.reverse),
                         (MODE_BY_PARTY, "GRN", True, True))

    def test_tab_delimiter(self):
        args = self.parse("--delimiter", "\\t", "--no-header", "a.tsv")
        self.assertEqual((args.delimiter, args.has_header), ("\t", False))

    def test_invalid(self):
        for argv in (["--delimiter", ";;", "a.csv"], ["--format", "xlsx", "a.csv"],
                     ["--workers", "0", "a.csv"], []):
            with self.subTest(argv=argv):
                with self.assertRaises(SystemExit):
                    self.parse(*argv)


if __name__ == "__main__":
    unittest.main()
