"""
Resolves riding winners and computes vote-share ratios.

All functions here are pure and read only finalized RidingResult
objects.

"""

# The number of decimal places ratios are rounded to for display.
RATIO_PLACES = 4


def top_candidates(result):
    """Return a list of the candidates sharing the highest vote count."""
    if not result.votes:
        return []
    top_votes = max(result.votes.values())
    return [candidate for candidate, votes in result.votes.items() if votes == top_votes]


def is_tied(result):
    """Return whether two or more candidates share the highest vote count."""
    return result.total_valid_votes > 0 and len(top_candidates(result)) > 1


def resolve_winner(result):
    """
    Return the winning Candidate of a riding, or None.

    The winner is the candidate with the strictly greatest vote count.
    There is no winner when the top count is tied (the riding is left
    indeterminate rather than broken arbitrarily) or when the riding
    has no valid votes.

    """
    if result.total_valid_votes == 0:
        return None
    top = top_candidates(result)
    if len(top) > 1:
        return None
    return top[0]


def vote_ratio(votes, total):
    """Return votes / total at full precision, or None if total is 0."""
    if total == 0:
        return None
    return votes / total


def riding_ratios(result):
    """Return a dict of Candidate to ratio (None for a riding without votes)."""
    total = result.total_valid_votes
    return {candidate: vote_ratio(votes, total) for candidate, votes in result.votes.items()}


def round_ratio(ratio):
    if ratio is None:
        return None
    return round(ratio, RATIO_PLACES)


def format_ratio(ratio):
    """Return a ratio as a string with four decimal places ("" for None)."""
    if ratio is None:
        return ""
    return "%.*f" % (RATIO_PLACES, ratio)
