"""
Services Layer

Business logic that:
- Accepts domain inputs (data, or a session plus IDs for the persistence helpers)
- Returns domain outputs (dataclasses, dicts)
- Does NOT depend on HTTP request/response objects

scoring, conflict_checker, standings and match_status are pure; booking and
pool_standings are the session-aware helpers the routes call around them.
"""
