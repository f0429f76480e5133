"""Utility functions for generating unique identifiers across the client.

Request identifiers are time-ordered so that backend logs for a burst of
replayed requests sort in the order they were issued.
"""

import uuid6


def generate_request_id() -> str:
    """Generates a time-ordered UUID v7 used as a request correlation id."""
    return str(uuid6.uuid7())
