import argparse
import logging
import sys

from pyridings.aggregation import aggregate_sources
from pyridings.errors import RidingsError
from pyridings.loading import LAYOUTS, LoaderConfig, get_layout, make_sources
from pyridings.parties import make_party_table
from pyridings.queries import MODES, MODE_BY_PARTY, MODE_TOTALS, QueryEngine, ResultView, Selection
from pyridings.resultswriting import WRITERS, make_writer
from pyridings.utils import expand_paths, time_it


log = logging.getLogger("pyridings")


def configure_log(level=logging.INFO):
    fmt = "%(name)s: [%(levelname)s] %(message)s"
    logging.basicConfig(format=fmt, level=level)
    log.info("logging configured: level=%s" % logging.getLevelName(level))


def exit_with_error(msg):
    log.error(msg)
    sys.exit(1)


def load_results(paths, parties, layout, config, max_workers=None):
    """
    Parse and aggregate the given files or directories.

    Returns a dict of riding_id to RidingResult.

    """
    paths = expand_paths(paths)
    sources = make_sources(paths, parties, layout=layout, config=config)
    return aggregate_sources(sources, max_workers=max_workers)


def query_results(paths, selection, layout_name="pollbypoll", config=None,
                  alias_paths=(), max_workers=None, reverse=False):
    """
    Run the whole pipeline short of writing, and return a ResultView.

    The view is computed in full before anything is written, so a
    failure never leaves partial output behind.

    """
    parties = make_party_table(alias_paths)
    layout = get_layout(layout_name)
    results = load_results(paths, parties, layout=layout, config=config,
                           max_workers=max_workers)
    engine = QueryEngine(results, parties)
    view = engine.run(selection)
    if reverse:
        view = ResultView(view.fields, list(reversed(view.rows)))
    return view


def convert(paths, selection, output_path=None, format_name="tsv", now=None, **kwargs):
    view = query_results(paths, selection, **kwargs)
    writer = make_writer(format_name, path=output_path, now=now)
    writer.write(view)
    return view


def make_arg_parser(docstr):
    parser = argparse.ArgumentParser(prog="riding-results", description=docstr,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("paths", metavar="PATH", nargs="+",
                        help="a results file, or a directory of .csv results files")
    parser.add_argument("--mode", choices=MODES, default=MODE_TOTALS,
                        help="the view to output (default: %(default)s)")
    parser.add_argument("--party", metavar="CODE", dest="party_code",
                        help="the party code for the %s view, e.g. GRN" % MODE_BY_PARTY)
    parser.add_argument("--won-only", action="store_true",
                        help="only output the ridings the party won")
    parser.add_argument("--reverse", action="store_true",
                        help="output rows in reverse order (top results first)")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), default="pollbypoll",
                        help="the column layout of the input files (default: %(default)s)")
    parser.add_argument("--delimiter", default=",",
                        help="the input field delimiter (default: %(default)r)")
    parser.add_argument("--no-header", dest="has_header", action="store_false",
                        help="the input files have no header row")
    parser.add_argument("--party-aliases", metavar="FILE", action="append", default=[],
                        help="a file of extra 'raw name:CODE' party aliases")
    parser.add_argument("--workers", type=int, default=None,
                        help="the number of parsing threads (1 parses serially)")
    parser.add_argument("--format", dest="format_name", choices=sorted(WRITERS), default="tsv",
                        help="the output format (default: %(default)s)")
    parser.add_argument("--output", metavar="PATH",
                        help="the output path (default: stdout)")
    parser.add_argument("--verbose", action="store_true", help="log debug messages")
    return parser


def parse_args(docstr, argv):
    parser = make_arg_parser(docstr)
    args = parser.parse_args(argv[1:])
    if args.delimiter == "\\t":
        args.delimiter = "\t"
    if len(args.delimiter) != 1:
        parser.error("the delimiter must be a single character: %r" % args.delimiter)
    if args.format_name == "xlsx" and args.output is None:
        parser.error("--output is required for xlsx output")
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def inner_main(args):
    selection = Selection(mode=args.mode, party_code=args.party_code, won_only=args.won_only)
    config = LoaderConfig(delimiter=args.delimiter, has_header=args.has_header)
    try:
        convert(args.paths, selection, output_path=args.output, format_name=args.format_name,
                layout_name=args.layout, config=config, alias_paths=args.party_aliases,
                max_workers=args.workers, reverse=args.reverse)
    except RidingsError as err:
        exit_with_error("ERROR: %s" % err)
    except OSError as err:
        exit_with_error("ERROR: cannot write output: %s" % err)


def main(docstr, argv):
    args = parse_args(docstr, argv)
    configure_log(logging.DEBUG if args.verbose else logging.INFO)
    with time_it("full program"):
        inner_main(args)
