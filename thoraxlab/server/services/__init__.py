"""
Service layer for the ThoraxLab server.

Services own the business rules (team roles, consensus, notifications,
activity logging and realtime broadcasts) and are called by the API routers
with an ``AsyncSession`` and the realtime hub.
"""
