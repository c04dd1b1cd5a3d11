"""
Chain brand resolution.

A query that names a widespread chain (e.g. "Taco Bell") is translated into
the brand's cuisine and type tags, so the search returns local venues that
serve the same kind of food instead of nothing.

Brands are checked in list order and the first one that matches wins. This
is first-match, not best-match: a short brand name that is contained in a
longer query can shadow a later, more specific brand.
"""
from __future__ import annotations

import re
from typing import Iterable

from ..models import ChainBrand

_APOSTROPHES = re.compile("['‘’`]")


def normalize(s: str | None) -> str:
    return _APOSTROPHES.sub("", (s or "").strip().lower())


def find_chain(query: str, chains: Iterable[ChainBrand]) -> ChainBrand | None:
    nq = normalize(query)
    if not nq:
        return None
    for chain in chains:
        n_name = normalize(chain.name)
        if n_name == nq or nq in n_name or n_name in nq:
            return chain
    return None


def terms_from_chain(chain: ChainBrand) -> list[str]:
    """Return the brand's normalized cuisine and types, deduplicated, in order."""
    terms: dict[str, None] = {}
    if chain.cuisine:
        terms[normalize(chain.cuisine)] = None
    for t in chain.types:
        terms[normalize(t)] = None
    return [t for t in terms if t]


def resolve_terms(query: str, chains: Iterable[ChainBrand]) -> list[str] | None:
    chain = find_chain(query, chains)
    if chain is None:
        return None
    return terms_from_chain(chain)
