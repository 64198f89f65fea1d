"""
Project export.

Builds a JSON document or a sectioned CSV file with a project's team,
discussions (with comments, evidence and consensus) and decisions. With
``anonymize`` set, person names are replaced by ``Member N``.
"""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database.entities import User
from thoraxlab.core.database.repositories.comments import CommentRepository
from thoraxlab.core.database.repositories.decisions import DecisionRepository
from thoraxlab.core.database.repositories.discussions import DiscussionRepository, EvidenceRepository
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.models.domain import ExportFormat
from thoraxlab.core.models.io import ProjectRead
from thoraxlab.server.services.access import require_member
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.consensus import ConsensusService
from thoraxlab.server.services.realtime import RealtimeHub

PROJECT_FIELDS = (
    "id",
    "title",
    "description",
    "status",
    "project_type",
    "template_id",
    "specialty",
    "tags",
    "start_date",
    "created_at",
    "updated_at",
)


class NameMasker:
    """Maps user ids to display names, or to ``Member N`` when anonymizing."""

    def __init__(self, users: Dict[str, User], anonymize: bool):
        self.users = users
        self.anonymize = anonymize
        self._aliases: Dict[str, str] = {}

    def __call__(self, user_id: Optional[str]) -> str:
        if user_id is None:
            return ""
        if self.anonymize:
            if user_id not in self._aliases:
                self._aliases[user_id] = f"Member {len(self._aliases) + 1}"
            return self._aliases[user_id]
        user = self.users.get(user_id)
        return user.name if user else "Unknown"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def render_csv(document: Dict[str, Any]) -> str:
    """
    Render an export document as CSV.

    The file has three sections (project, team, discussions) separated by a
    blank line. Every cell is quoted and embedded quotes are doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(["Project"])
    writer.writerow(["Field", "Value"])
    for field in PROJECT_FIELDS:
        writer.writerow([field, _cell(document["project"].get(field))])
    writer.writerow([])

    writer.writerow(["Team"])
    writer.writerow(["Name", "Team Role", "Background", "Institution", "Joined"])
    for member in document["team"]:
        writer.writerow(
            [_cell(member[key]) for key in ("name", "role", "user_role", "institution", "joined_at")]
        )
    writer.writerow([])

    writer.writerow(["Discussions"])
    writer.writerow(["Title", "Type", "Author", "Upvotes", "Downvotes", "Consensus", "Comments", "Evidence", "Created"])
    for discussion in document["discussions"]:
        writer.writerow(
            [
                _cell(discussion["title"]),
                _cell(discussion["discussion_type"]),
                _cell(discussion["author"]),
                _cell(discussion["upvotes"]),
                _cell(discussion["downvotes"]),
                _cell(discussion["consensus"]["level"]),
                _cell(len(discussion["comments"])),
                _cell(len(discussion["evidence"])),
                _cell(discussion["created_at"]),
            ]
        )
    return buffer.getvalue()


def export_filename(project_id: str, export_format: ExportFormat, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"thoraxlab-project-{project_id}-{today.isoformat()}.{export_format.value}"


class ExportService:
    """Builds project exports for team members."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.hub = hub

    async def build(self, project_id: str, user: User, anonymize: bool = False) -> Dict[str, Any]:
        """
        Assemble the export document of a project (team members only).

        Returns:
            JSON-serializable dict with ``project``, ``team``, ``discussions``
            and ``decisions``
        """
        project, _ = await require_member(self.session, project_id, user.id, action="export this project")
        team = await ProjectTeamRepository(self.session).list_team(project_id)
        discussions = await DiscussionRepository(self.session).list_for_project(project_id)
        comments_repo = CommentRepository(self.session)
        evidence_repo = EvidenceRepository(self.session)
        consensus = ConsensusService(self.session, self.hub)
        decisions = await DecisionRepository(self.session).list_for_project(project_id)

        people: Dict[str, User] = {u.id: u for _, u in team}
        author_ids = {d.author_id for d in discussions}
        for discussion in discussions:
            author_ids.update(c.author_id for c in await comments_repo.list_for_discussion(discussion.id))
        missing = [uid for uid in author_ids if uid not in people]
        people.update({u.id: u for u in await UserRepository(self.session).list_by_ids(missing)})
        name = NameMasker(people, anonymize)

        discussion_docs: List[Dict[str, Any]] = []
        for discussion in discussions:
            comments = await comments_repo.list_for_discussion(discussion.id)
            evidence = await evidence_repo.list_for_discussion(discussion.id)
            discussion_docs.append(
                {
                    "id": discussion.id,
                    "title": discussion.title,
                    "content": discussion.content,
                    "discussion_type": discussion.discussion_type.value,
                    "author": name(discussion.author_id),
                    "tags": discussion.tags or [],
                    "upvotes": discussion.upvotes,
                    "downvotes": discussion.downvotes,
                    "is_resolved": discussion.is_resolved,
                    "created_at": discussion.created_at.isoformat(),
                    "consensus": (await consensus.consensus_for(discussion)).model_dump(mode="json"),
                    "comments": [
                        {
                            "id": c.id,
                            "parent_id": c.parent_id,
                            "author": name(c.author_id),
                            "content": c.content,
                            "created_at": c.created_at.isoformat(),
                        }
                        for c in comments
                    ],
                    "evidence": [
                        {
                            "title": e.title,
                            "url": e.url,
                            "source_type": e.source_type.value,
                            "strength": e.strength.value,
                            "summary": e.summary,
                        }
                        for e in evidence
                    ],
                }
            )

        document = {
            "project": ProjectRead.model_validate(project).model_dump(mode="json"),
            "team": [
                {
                    "name": name(u.id),
                    "role": member.role.value,
                    "user_role": u.role.value,
                    "institution": None if anonymize else u.institution,
                    "joined_at": member.joined_at.isoformat(),
                }
                for member, u in team
            ],
            "discussions": discussion_docs,
            "decisions": [
                {
                    "id": d.id,
                    "title": d.title,
                    "status": d.status.value,
                    "priority": d.priority.value,
                    "origin": d.origin.value,
                    "consensus_level": d.consensus_level.value if d.consensus_level else None,
                    "created_by": name(d.created_by),
                    "resolved_at": d.resolved_at.isoformat() if d.resolved_at else None,
                }
                for d in decisions
            ],
        }
        if anonymize:
            document["project"]["lead_id"] = None

        await ActivityService(self.session).log(
            user.id, "project_exported", project_id, "project", project_id, {"anonymize": anonymize}
        )
        return document
