"""
Search-and-rank pipeline.

Responsibilities:
- Resolve chain-brand queries into cuisine/type terms.
- Match venues against terms or the raw query.
- Compute haversine distance and sort results nearest first.
"""
