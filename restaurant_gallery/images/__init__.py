"""
Restaurant image resolution pipeline.

Responsibilities:
- Cache resolved image sets per (query, page) with TTL and LRU eviction.
- Gate provider calls with a self-imposed rate window.
- Stagger outbound provider calls through a fixed-concurrency queue.
- Try the primary provider, then the secondary, classifying each failure.
- Normalize results to an exact count, padding from a curated fallback catalog.
"""
