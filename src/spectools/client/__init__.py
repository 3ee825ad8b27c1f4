"""HTTP execution of tools against a live API.

Re-exports :class:`~spectools.client.api_client.ApiClient`.
"""

from spectools.client.api_client import ApiClient

__all__ = ["ApiClient"]
