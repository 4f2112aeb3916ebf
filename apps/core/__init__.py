"""
Core app for SafraReport.

Provides shared models, the status state machine, audit trail, error
handling, permissions and health checks.
"""
