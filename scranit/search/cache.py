"""
Search result cache.

Keys carry the query, the reference point and the catalog version. Every
client reports its own coordinate, so most keys are seen only a few times:
entries expire after ``_TTL_SECONDS`` and the table never holds more than
``_MAX_ENTRIES``, evicting the least recently used entry first.
"""
from __future__ import annotations

import hashlib
import json
import time
from collections import OrderedDict
from typing import Any

_TTL_SECONDS = 300
_MAX_ENTRIES = 512

# key -> (stored_at, value), least recently used first
_entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
_hits = 0
_misses = 0
_evictions = 0


def _key_for(request_dict: dict) -> str:
    encoded = json.dumps(request_dict, sort_keys=True, default=str).encode()
    return hashlib.sha256(encoded).hexdigest()[:16]


def _expired(stored_at: float, now: float) -> bool:
    return now - stored_at >= _TTL_SECONDS


def _prune(now: float) -> None:
    global _evictions
    stale = [k for k, (stored_at, _) in _entries.items() if _expired(stored_at, now)]
    for k in stale:
        del _entries[k]
    while len(_entries) >= _MAX_ENTRIES:
        _entries.popitem(last=False)
        _evictions += 1


def cache_get(request_dict: dict) -> Any | None:
    global _hits, _misses
    key = _key_for(request_dict)
    entry = _entries.get(key)
    if entry is not None and not _expired(entry[0], time.time()):
        _entries.move_to_end(key)
        _hits += 1
        return entry[1]
    if entry is not None:
        del _entries[key]
    _misses += 1
    return None


def cache_set(request_dict: dict, value: Any) -> None:
    key = _key_for(request_dict)
    now = time.time()
    _entries.pop(key, None)
    _prune(now)
    _entries[key] = (now, value)


def get_cache_stats() -> dict:
    lookups = _hits + _misses
    return {
        "size": len(_entries),
        "max_size": _MAX_ENTRIES,
        "ttl_seconds": _TTL_SECONDS,
        "hits": _hits,
        "misses": _misses,
        "evictions": _evictions,
        "hit_rate": round(_hits / lookups * 100, 1) if lookups else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses, _evictions
    _entries.clear()
    _hits = 0
    _misses = 0
    _evictions = 0
