"""Notifications app package.

Plain-text email to booking creators and the admin mailbox. The booking
tasks call into ``services``; delivery failures are logged, never raised.
"""
