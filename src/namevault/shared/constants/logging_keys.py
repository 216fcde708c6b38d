"""Logging Context Keys Constants.

This module contains logging context field keys and operation names to
keep structured logging consistent.
"""


class LogContextKeys:
    """Logging context dictionary keys."""

    OPERATION = "operation"
    TIER = "tier"
    TTL_CLASS = "ttl_class"
    KEY = "key"
    KEY_COUNT = "key_count"
    BATCH_SIZE = "batch_size"
    BATCH_INDEX = "batch_index"
    WINDOW_SIZE = "window_size"
    ENDPOINT = "endpoint"
    STATUS_CODE = "status_code"
    ERROR_TYPE = "error_type"
    ORIGINAL_ERROR = "original_error"
    FILE_PATH = "file_path"


class LogOperationNames:
    """Operation names used in structured logs."""

    RESOLVE = "resolve"
    CACHE_LOOKUP = "cache_lookup"
    CACHE_BACKFILL = "cache_backfill"
    CACHE_WRITE_BACK = "cache_write_back"
    CACHE_GET = "cache_get"
    CACHE_PUT = "cache_put"
    CACHE_PURGE = "cache_purge"
    INITIALIZE_CACHE = "initialize_cache"
    BULK_RESOLVE = "bulk_resolve"
    SINGLE_RESOLVE = "single_resolve"
    ESCALATE_BATCH = "escalate_batch"
    RUN_BOUNDED = "run_bounded"
    REMOTE_POST = "remote_post"
    DECODE_RESPONSE = "decode_response"
