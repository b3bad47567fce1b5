from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator


def setup_metrics(app: FastAPI) -> Instrumentator:
    """Instrument every route and expose Prometheus metrics at /metrics.

    Default metrics: http_requests_total, http_request_duration_seconds,
    http_request_size_bytes and http_response_size_bytes, labelled by handler,
    method and status class.
    """
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics"],
    )
    instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return instrumentator
