"""
Search analytics.

Responsibilities:
- Record one event per search and nearby lookup (in-process only).
- Summarise query volume, chain expansions, empty results and cache use.
"""
