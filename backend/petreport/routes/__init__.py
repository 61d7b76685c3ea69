"""
PetReport Backend — API Routes Package
========================================

Route Inventory:
    - root.py:   GET  /            (welcome / liveness message)
    - users.py:  ANY  /v1/users/*  (user and pet-report business routes)
    - /uploads/* is a StaticFiles mount registered by the app factory

Every route sits behind the full filter chain in petreport.middleware.
"""
