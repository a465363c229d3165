# Services package init
"""
Pastebin Backend - Services Layer
==================================

Service Inventory:
    - identifiers:   generate_id(), the short unambiguous paste ids
    - PasteStore:    SQLAlchemy persistence (source of truth)
    - PasteCache:    best-effort read cache (Redis, in-memory, or disabled)
    - PasteService:  create / get / delete / list_recent over store + cache
"""
