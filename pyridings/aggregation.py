"""
Folds poll records into per-riding candidate totals.

The fold is commutative and associative: partial tallies built from
different files (or different orderings of the same rows) merge into
the same final results.  This is what allows each input file to be
parsed by its own worker.

"""

from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
import logging
from types import MappingProxyType

from pyridings.loading import iter_poll_records
from pyridings.utils import EqualityMixin, time_it


Candidate = namedtuple("Candidate", ("riding_id", "last_name", "first_name", "party"))

log = logging.getLogger("pyridings")


def candidate_sort_key(candidate):
    return (candidate.last_name, candidate.first_name, candidate.party.code)


def riding_sort_key(riding_id):
    # Numeric riding ids (e.g. "10001") sort by value, names alphabetically.
    return (0, int(riding_id), "") if riding_id.isdecimal() else (1, 0, riding_id)


class RidingTally(object):

    """
    The mutable, in-progress totals for one riding.

    Attributes:
      votes: a dict of Candidate to accumulated vote count.  Entries are
        created the first time a candidate is seen and never removed.

    """

    def __init__(self, riding_id, name):
        self.riding_id = riding_id
        self.name = name
        self.votes = {}
        self.names = {name}

    def __repr__(self):
        return ("<RidingTally object: riding_id=%r, name=%r, %d candidates>" %
                (self.riding_id, self.name, len(self.votes)))

    def set_name(self, name, warn=True):
        if name in self.names:
            return
        self.names.add(name)
        if warn:
            log.warning("riding %s has two names: %r and %r" % (self.riding_id, self.name, name))
        self.name = min(self.name, name)

    def add(self, record):
        candidate = Candidate(riding_id=record.riding_id, last_name=record.last_name,
                              first_name=record.first_name, party=record.party)
        votes = 0 if record.excluded else record.votes
        self.votes[candidate] = self.votes.get(candidate, 0) + votes

    def merge(self, other):
        """Add the totals of another tally for the same riding."""
        # A tally with several names has already warned about them.
        warn = len(other.names) == 1
        for name in sorted(other.names):
            self.set_name(name, warn=warn)
        for candidate, votes in other.votes.items():
            self.votes[candidate] = self.votes.get(candidate, 0) + votes

    def finalize(self):
        return RidingResult(self.riding_id, self.name, self.votes)


class RidingResult(EqualityMixin):

    """
    The final, read-only totals for one riding.

    Attributes:
      votes: a read-only mapping of Candidate to vote count, ordered by
        candidate last name, first name, then party code.
      total_valid_votes: the sum of the candidate vote counts.  Excluded
        polls contribute to neither.

    """

    equality_attrs = ("riding_id", "name", "vote_items")

    def __init__(self, riding_id, name, votes):
        self.riding_id = riding_id
        self.name = name
        ordered = sorted(votes.items(), key=lambda item: candidate_sort_key(item[0]))
        self.votes = MappingProxyType(dict(ordered))
        self.total_valid_votes = sum(self.votes.values())

    def __repr__(self):
        return ("<RidingResult object: riding_id=%r, name=%r, %d candidates, %d votes>" %
                (self.riding_id, self.name, len(self.votes), self.total_valid_votes))

    @property
    def candidates(self):
        return tuple(self.votes.keys())

    @property
    def vote_items(self):
        return tuple(self.votes.items())


def fold_records(records, tallies=None):
    """
    Fold poll records into a dict of riding_id to RidingTally.

    Excluded records still register their riding and candidate, but
    with no votes.

    Arguments:
      tallies: an optional dict to continue folding into.  It is
        modified in place and returned.

    """
    if tallies is None:
        tallies = {}
    for record in records:
        try:
            tally = tallies[record.riding_id]
        except KeyError:
            tally = RidingTally(record.riding_id, record.riding)
            tallies[record.riding_id] = tally
        else:
            tally.set_name(record.riding)
        tally.add(record)
    return tallies


def merge_tallies(left, right):
    """
    Return a new dict combining two partial tally dicts.

    Ridings present in both are summed, so the inputs need not be
    disjoint.  Neither argument is modified.

    """
    merged = {}
    for tallies in (left, right):
        for riding_id, tally in tallies.items():
            try:
                target = merged[riding_id]
            except KeyError:
                target = RidingTally(riding_id, tally.name)
                # Already warned about when the names were first folded.
                target.names.update(tally.names)
                merged[riding_id] = target
            target.merge(tally)
    return merged


def finalize(tallies):
    """Return a dict of riding_id to RidingResult, ordered by riding_id."""
    return {riding_id: tallies[riding_id].finalize()
            for riding_id in sorted(tallies, key=riding_sort_key)}


def aggregate(records):
    """Return a dict of riding_id to RidingResult for the given records."""
    return finalize(fold_records(records))


def aggregate_sources(sources, max_workers=None):
    """
    Parse and aggregate the given PollSource objects.

    Each source is folded by its own worker thread, and the partial
    tallies are then merged in source order.  A load error in any
    source aborts the whole aggregation.

    Arguments:
      max_workers: the number of worker threads.  A value of 1 folds
        the sources one after another in the calling thread.

    """
    sources = list(sources)
    with time_it("aggregating %d sources" % len(sources)):
        if max_workers == 1 or len(sources) <= 1:
            tallies = fold_records(iter_poll_records(sources))
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                # map() yields results in source order and re-raises the
                # first error in that order.
                partials = list(executor.map(fold_records, sources))
            tallies = {}
            for partial in partials:
                tallies = merge_tallies(tallies, partial)
        results = finalize(tallies)

    log.info("aggregated: %d ridings, %d candidates" %
             (len(results), sum(len(result.votes) for result in results.values())))
    return results
