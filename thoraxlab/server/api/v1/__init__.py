"""
Version 1 of the ThoraxLab REST and realtime API.

Each module exposes a ``router`` that ``thoraxlab.server.main`` mounts under
``/api/v1`` (health routes are mounted at the root).
"""
