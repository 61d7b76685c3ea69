"""
PetReport Backend — Application Package Initializer
=====================================================

What: Marks the `petreport` directory as a Python package.
Who:  Imported by uvicorn (`petreport.main:app`), pytest, and the client gateway.

Architecture Note:
    Two pipelines sit on either side of the HTTP boundary:

    ┌─────────────────────────────────────┐
    │   client.gateway (Egress Gateway)   │  ← token injection, dedup, logout
    ├──────────────── HTTP ───────────────┤
    │   middleware (Ingress Filter Chain) │  ← CORS → headers → sanitize →
    │                                     │    client IP → UA block → rate limit
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← GET /, /uploads, /v1/users
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
