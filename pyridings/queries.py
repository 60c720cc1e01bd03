"""
Projects aggregated riding results into the views that can be emitted.

"""

from collections import namedtuple
import logging

from pyridings.errors import QueryError
from pyridings.standings import resolve_winner, riding_ratios, vote_ratio


MODE_BY_PARTY = "by-party"
MODE_TOTALS = "totals"

MODES = (MODE_BY_PARTY, MODE_TOTALS)

Selection = namedtuple("Selection", ("mode", "party_code", "won_only"))
Selection.__new__.__defaults__ = (None, False)

# A row of the by-party view.  The ratio is None for a riding without
# valid votes.
RidingRow = namedtuple("RidingRow", ("riding", "party", "last_name", "first_name",
                                     "votes", "ratio", "won"))

# A row of the national totals view.
TotalsRow = namedtuple("TotalsRow", ("party", "votes", "ratio", "seats"))

# The output of a query: the fixed field names of the view, and its rows
# in presentation order.
ResultView = namedtuple("ResultView", ("fields", "rows"))


log = logging.getLogger("pyridings")


def by_party_sort_key(row):
    return (row.votes, row.riding, row.last_name, row.first_name)


class QueryEngine(object):

    """
    Answers queries over a finalized set of riding results.

    Nothing is cached between queries.

    """

    def __init__(self, results, parties):
        """
        Arguments:
          results: a dict of riding_id to RidingResult.
          parties: a PartyTable object.

        """
        self.results = results
        self.parties = parties

    def by_party(self, party_code, won_only=False):
        """
        Return a list of RidingRow for each candidate of a party.

        Rows are in ascending order of votes.  A known party without
        candidates gives an empty list; an unknown code is a QueryError.

        """
        party = self.parties.get(party_code)
        rows = []
        for result in self.results.values():
            winner = resolve_winner(result)
            ratios = riding_ratios(result)
            for candidate, votes in result.votes.items():
                if candidate.party != party:
                    continue
                won = candidate == winner
                if won_only and not won:
                    continue
                rows.append(RidingRow(riding=result.name, party=party.code,
                                      last_name=candidate.last_name,
                                      first_name=candidate.first_name,
                                      votes=votes, ratio=ratios[candidate], won=won))
        rows.sort(key=by_party_sort_key)
        return rows

    def won_seats(self, party_code):
        return self.by_party(party_code, won_only=True)

    def national_totals(self):
        """
        Return a list of TotalsRow, one per party with a candidate.

        Parties without votes or seats are included.  Rows are ordered
        by seats, then votes (both descending), then party code.

        """
        votes = {}
        seats = {}
        national_total = 0
        for result in self.results.values():
            national_total += result.total_valid_votes
            for candidate, candidate_votes in result.votes.items():
                code = candidate.party.code
                votes[code] = votes.get(code, 0) + candidate_votes
                seats.setdefault(code, 0)
            winner = resolve_winner(result)
            if winner is not None:
                seats[winner.party.code] += 1

        rows = [TotalsRow(party=code, votes=votes[code],
                          ratio=vote_ratio(votes[code], national_total), seats=seats[code])
                for code in votes]
        rows.sort(key=lambda row: (-row.seats, -row.votes, row.party))
        return rows

    def run(self, selection):
        """Return the ResultView for a Selection."""
        log.info("running query: %r" % (selection, ))
        if selection.mode == MODE_TOTALS:
            return ResultView(TotalsRow._fields, self.national_totals())
        if selection.mode == MODE_BY_PARTY:
            if not selection.party_code:
                raise QueryError("a party code is required for mode %r" % MODE_BY_PARTY)
            rows = self.by_party(selection.party_code, won_only=selection.won_only)
            return ResultView(RidingRow._fields, rows)
        raise QueryError("unknown query mode: %r (expected one of: %s)" %
                         (selection.mode, ", ".join(MODES)))
