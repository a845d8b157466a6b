"""
Interfaces layer package.

FastAPI routers, Pydantic schemas and dependency wiring.
No business logic belongs here.
"""
