"""Fantasy Bakes: season-long fantasy league scoring for a televised baking contest.

Bakers are grouped into Teams, administrators record per-week events, and
scores roll up into a ranked leaderboard.
"""
