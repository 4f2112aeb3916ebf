"""
Businesses app for SafraReport.

Business directory with moderated user reviews and rating aggregation.
"""
