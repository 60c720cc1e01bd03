"""
Usage: riding-results [options] PATH [PATH ...]

Aggregates poll-by-poll election results and writes one of two views
to stdout (or to the --output path).

The by-party view lists every candidate of one party, one row per
riding, with the candidate's votes, vote share, and whether the
candidate won the riding.  For example:

  riding-results --mode by-party --party GRN --reverse data/

The totals view lists each party's national votes, vote share, and
seats won:

  riding-results --mode totals data/

Arguments:

  PATH: a poll-by-poll results file (one per province or territory),
    or a directory containing such files as .csv files.  Files must
    be UTF-8; convert older Latin-1 datasets first.

In the above, relative paths will be interpreted as relative to the
current working directory.
"""

import sys

import pyridings.main


def main():
    """
    The main console_script setup.py entry point.
    """
    pyridings.main.main(__doc__, sys.argv)
