#!/usr/bin/env python3
"""
Metrics definitions for the AI stream relay.
"""

import prometheus_client

STREAM_REQUESTS = prometheus_client.Counter(
    'ai_stream_requests_total', 'Stream endpoint requests by outcome', ['outcome']
)
UPSTREAM_ERRORS = prometheus_client.Counter(
    'ai_stream_upstream_errors_total', 'Failed upstream calls by status code', ['status']
)
STREAMED_BYTES = prometheus_client.Counter(
    'ai_stream_streamed_bytes_total', 'Event-stream bytes relayed to clients'
)
