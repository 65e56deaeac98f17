"""Bookings app package.

Holds the pool/villa availability engine (``domain``), the use cases that
run it inside locked transactions (``application``), storage models and
the REST API. Creation and status changes notify the booking's creator by
email through Celery tasks.
"""
