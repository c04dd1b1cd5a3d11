"""
Scran It: find nearby, independently owned restaurants.

Responsibilities:
- Load the flat venue catalog and the list of known chain brands.
- Expand chain-brand queries into cuisine/type terms.
- Match, measure and rank venues by distance from a reference point.
"""
