"""
Catalog store.

Responsibilities:
- Read the flat venue catalog and chain brand list from JSON files.
- Canonicalize records, dropping venues without an address.
- Cache the parsed catalog until the backing file changes.
"""
