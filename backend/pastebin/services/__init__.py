# Services package init
"""
Pastebin Backend: Services Layer
=================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - PasteService: content validation, id generation, expiry checks,
      view counting
"""
