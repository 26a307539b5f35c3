"""
Highscore boards for wired game items.

Keeps recorded scores in memory and ranks them per item by time window
(daily, weekly, monthly, all time) and scoring strategy (classic, per team,
most wins).
"""
