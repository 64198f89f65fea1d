"""ThoraxLab.

This package contains the collaboration server used by ThoraxLab research
teams to run clinical and industry research projects together.

High-level architecture
-----------------------

The codebase is organized around two layers:

- **Core** (``thoraxlab.core``): logging, monitoring, domain enums, I/O
  schemas and the SQLModel persistence layer (entities and repositories).
- **Server** (``thoraxlab.server``): the FastAPI application, its
  configuration, the service layer and the REST/WebSocket/SSE endpoints.

Typical workflow
----------------

1. A user logs in and receives a bearer session token.
2. The user creates a project and invites team members.
3. Team members open discussions, attach evidence and comment.
4. Team votes are tallied by role into a consensus level.
5. Once a decision discussion reaches high consensus a Decision is recorded
   and the team is notified in realtime.
"""

__version__ = "0.1.0"
