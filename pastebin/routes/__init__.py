# Routes package init
"""
Pastebin Backend - HTTP Routes
===============================

Route Inventory:
    - pastes.py:  GET /, POST /update/, DELETE /update/{id},
                  GET /archive/, GET /{id}
    - health.py:  GET /health

Routes stay thin: read the request, call PasteService, render the result.
"""
