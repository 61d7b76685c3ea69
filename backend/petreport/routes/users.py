"""
PetReport Backend — Users Router Mount Point
==============================================

What:  The router mounted at /v1/users.
How:   User and pet-report handlers live outside this package and register
       their endpoints on `router`, or hand their own APIRouter to
       `create_app(users_router=...)`. Either way the router is included
       behind the whole filter chain, so handlers only ever see sanitized,
       rate-limited requests from non-blocked clients.
"""

from fastapi import APIRouter

USERS_PREFIX = "/v1/users"

router = APIRouter(tags=["Users"])
