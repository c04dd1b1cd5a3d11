"""
Offline catalog builders.

Responsibilities:
- Fetch restaurants, fast food and cafes from OpenStreetMap (Overpass API).
- Normalize them into the venue catalog and the chain brand list.
- Clean an existing catalog (drop unaddressed venues, drop chains).

Nothing here runs on the search request path.
"""
