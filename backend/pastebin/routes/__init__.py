# Routes package init
"""
Pastebin Backend: API Routes Package
=====================================

Route Inventory:
    - health.py:  GET  /                  (status message)
                  GET  /health            (service health check)
    - pastes.py:  POST /paste             (create a paste)
                  GET  /paste/{paste_id}  (read a paste, counts the view)

Unmatched paths fall through to the 404 handler in main.py.

Routes stay THIN: extract input, call the service, let the global
exception handlers pick the status code.
"""
