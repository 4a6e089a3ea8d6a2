from prometheus_client import Counter, Histogram, generate_latest
from fastapi import Response

# Метрики для HTTP запросов
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

# Метрики для кэша сессий
session_cache_hits_total = Counter('session_cache_hits_total', 'Total session cache hits')
session_cache_misses_total = Counter('session_cache_misses_total', 'Total session cache misses')

# Онбординг
role_assignments_total = Counter(
    'role_assignments_total',
    'Role assignment attempts by result',
    ['result']
)
guard_decisions_total = Counter(
    'guard_decisions_total',
    'Page guard decisions',
    ['page', 'kind']
)

def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type="text/plain")
