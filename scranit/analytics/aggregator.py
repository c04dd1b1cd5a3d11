from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top queries
    query_counter: Counter[str] = Counter()
    for s in searches:
        q = (s.get("query") or "").strip().lower()
        if q:
            query_counter[q] += 1
    top_queries = [{"query": q, "count": c} for q, c in query_counter.most_common(10)]

    # Chain expansions
    chain_counter: Counter[str] = Counter()
    for s in searches:
        if s.get("chain"):
            chain_counter[s["chain"]] += 1
    expansions = sum(chain_counter.values())
    top_chains = [{"name": n, "count": c} for n, c in chain_counter.most_common(10)]

    # Empty queries vs queries that found nothing
    empty_queries = sum(1 for s in searches if not (s.get("query") or "").strip())
    issued = total - empty_queries
    no_match = sum(
        1 for s in searches
        if (s.get("query") or "").strip() and s.get("results_returned", 0) == 0
    )

    # Cache stats
    cache_hits = sum(1 for s in searches if s.get("cache_hit"))
    cache_misses = total - cache_hits

    nearby_lookups = sum(1 for e in events if e["type"] == "nearby")

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_queries": top_queries,
        "chain_expansions": {
            "total": expansions,
            "rate": round(expansions / issued * 100, 1) if issued else 0.0,
            "top_chains": top_chains,
        },
        "empty_queries": empty_queries,
        "no_match_rate": round(no_match / issued * 100, 1) if issued else 0.0,
        "nearby_lookups": nearby_lookups,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
    }
