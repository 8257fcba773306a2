"""
Constants shared by the vote and country services.
"""

# Top-countries limit window
DEFAULT_TOP_LIMIT = 10
MIN_TOP_LIMIT = 1
MAX_TOP_LIMIT = 50

# Country metadata cache
COUNTRY_CACHE_TTL = 300  # 5 minutes
COUNTRY_CACHE_PREFIX = "country"
CACHE_MAXSIZE = 1024

# REST Countries lookup
REST_COUNTRIES_API = "https://restcountries.com/v3.1"
COUNTRY_LOOKUP_TIMEOUT = 5.0  # seconds, per lookup

# Fallback metadata used when a lookup fails during aggregation
UNKNOWN_REGION = "Unknown"

# Error codes surfaced in problem responses
ERROR_CODES = {
    "VALIDATION_ERROR": "VALIDATION_ERROR",
    "DUPLICATE_ENTRY": "DUPLICATE_ENTRY",
    "NOT_FOUND": "NOT_FOUND",
    "RATE_LIMIT_EXCEEDED": "RATE_LIMIT_EXCEEDED",
    "INTERNAL_ERROR": "INTERNAL_ERROR",
    "EXTERNAL_API_ERROR": "EXTERNAL_API_ERROR",
}

DUPLICATE_EMAIL_MESSAGE = "This email has already been used to vote"
COUNTRY_NOT_FOUND_MESSAGE = "Country not found"
