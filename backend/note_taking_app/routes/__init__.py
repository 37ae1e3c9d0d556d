"""
Note Taking App — Routes Package
==================================

Route Inventory:
    - user.py:    GET /        (landing page, mounted at the root)
    - health.py:  GET /health  (service health check)
"""
