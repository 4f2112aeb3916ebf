"""
Articles app for SafraReport.

News articles, the editorial review workflow and version history.
"""
