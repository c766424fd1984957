"""Logging subsystem.

Public API::

    from acmechallenge.logging import configure_logging

    configure_logging(settings.logging)
"""

from acmechallenge.logging.setup import configure_logging

__all__ = ["configure_logging"]
