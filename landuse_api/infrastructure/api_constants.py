"""
Overpass API constants.

Centralizing these values makes it easy to point the service at a
different Overpass mirror.
"""


class OverpassEndpoints:
    """Public Overpass interpreter endpoints."""

    MAIN = "https://overpass-api.de/api/interpreter"

    # Form field carrying the query text
    QUERY_FIELD = "data"


class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    USER_AGENT = "landuse-allocation-api"

    # Status codes worth retrying besides 5xx
    RETRYABLE_CLIENT_STATUSES = frozenset({429})

    # Overpass reports server-side failures in a 200 response 'remark'
    REMARK_ERROR_MARKERS = ("runtime error", "timed out", "out of memory")
