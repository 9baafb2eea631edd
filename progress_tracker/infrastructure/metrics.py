from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

login_attempts_total = Counter('login_attempts_total', 'Login attempts', ['outcome'])
progress_upserts_total = Counter('progress_upserts_total', 'Progress entries written through the daily upsert')
tutor_requests_total = Counter('tutor_requests_total', 'Tutor passthrough requests', ['outcome'])

def metrics_endpoint():
    """Prometheus text exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
