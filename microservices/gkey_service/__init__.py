"""
G-Key Service

Per-streamer, per-category exclusivity keys that gate campaign participation:
- Key lifecycle (available -> locked -> cooloff -> available)
- Brand-aware cooloff with the same-brand exception
- Lazy and scheduled cooloff expiry
- Key summaries and admin force-unlock

Port: 8301
"""

__version__ = "1.0.0"
__service__ = "gkey_service"
