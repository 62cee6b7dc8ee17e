from prometheus_client import Counter, Histogram

cache_lookups = Counter(
    'filtercraft_cache_lookups_total',
    'Cache lookups by cache layer and outcome',
    ['layer', 'outcome'],
)
filter_latency = Histogram(
    'filtercraft_filter_latency_seconds',
    'Filter call latency',
    ['mode'],
)


def record_lookup(layer: str, hit: bool) -> None:
    cache_lookups.labels(layer=layer, outcome='hit' if hit else 'miss').inc()
