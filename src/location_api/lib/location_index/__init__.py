"""Location index library — HTTP access to the postal/city/region dataset.

Public API:
    - LocationIndexClient: async client for the /locations/* endpoints
    - IndexRow: normalized index row
    - parse_row: raw JSON row -> IndexRow (None when unusable)
"""

from location_api.lib.location_index.client import IndexRow, LocationIndexClient, parse_row

__all__ = ["IndexRow", "LocationIndexClient", "parse_row"]
