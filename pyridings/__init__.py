"""
Aggregates poll-by-poll election results into riding and party totals.

"""
