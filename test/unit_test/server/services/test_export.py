"""Unit tests for project export."""

import csv
import io
from datetime import date

import pytest

from thoraxlab.core.database.entities import Comment, Discussion, User
from thoraxlab.core.errors import PermissionDeniedError
from thoraxlab.core.models.domain import ExportFormat, TeamRole, UserRole
from thoraxlab.server.services.export import ExportService, NameMasker, export_filename, render_csv
from test.unit_test.helpers import make_project, make_user


def _document():
    return {
        "project": {
            "id": "p1",
            "title": 'COPD "early" detection',
            "description": "Line one",
            "status": "active",
            "tags": ["copd", "ai"],
            "start_date": None,
        },
        "team": [
            {
                "name": "Dr. Alex Chen",
                "role": "lead",
                "user_role": "clinician",
                "institution": "MGH",
                "joined_at": "2026-01-01T00:00:00",
            }
        ],
        "discussions": [
            {
                "title": "Cohort",
                "discussion_type": "decision",
                "author": "Dr. Alex Chen",
                "upvotes": 2,
                "downvotes": 0,
                "consensus": {"level": "high"},
                "comments": [{}, {}],
                "evidence": [],
                "created_at": "2026-01-02T00:00:00",
            }
        ],
        "decisions": [],
    }


class TestNameMasker:
    def test_real_names(self):
        alex = User(id="u1", name="Dr. Alex Chen", email="a@b.co")
        mask = NameMasker({"u1": alex}, anonymize=False)

        assert mask("u1") == "Dr. Alex Chen"
        assert mask("u2") == "Unknown"
        assert mask(None) == ""

    def test_aliases_are_stable(self):
        mask = NameMasker({}, anonymize=True)

        assert [mask("u1"), mask("u2"), mask("u1")] == ["Member 1", "Member 2", "Member 1"]


class TestRenderCsv:
    def test_sections_and_quoting(self):
        text = render_csv(_document())
        rows = list(csv.reader(io.StringIO(text)))

        assert rows[0] == ["Project"]
        assert ["title", 'COPD "early" detection'] in rows
        assert ["tags", "copd; ai"] in rows
        assert ["start_date", ""] in rows
        assert ["Team"] in rows
        assert ["Dr. Alex Chen", "lead", "clinician", "MGH", "2026-01-01T00:00:00"] in rows
        assert rows[-1] == ["Cohort", "decision", "Dr. Alex Chen", "2", "0", "high", "2", "0", "2026-01-02T00:00:00"]

    def test_every_cell_is_quoted(self):
        text = render_csv(_document())

        assert text.startswith('"Project"\n"Field","Value"\n')
        assert '"COPD ""early"" detection"' in text

    def test_blank_line_between_sections(self):
        assert render_csv(_document()).count("\n\n") == 2


class TestExportFilename:
    def test_filename(self):
        assert (
            export_filename("p1", ExportFormat.csv, date(2026, 10, 19)) == "thoraxlab-project-p1-2026-10-19.csv"
        )


@pytest.mark.asyncio
class TestExportService:
    async def test_build_document(self, session, hub):
        lead = await make_user(session, "Dr. Alex Chen", institution="MGH")
        member = await make_user(session, "Emma Rodriguez", role=UserRole.industry)
        project = await make_project(session, lead, members=[(member, TeamRole.contributor)])
        discussion = Discussion(project_id=project.id, author_id=lead.id, title="Cohort", content="Body")
        session.add(discussion)
        await session.commit()
        session.add(Comment(discussion_id=discussion.id, author_id=member.id, content="Agreed"))
        await session.commit()

        document = await ExportService(session, hub).build(project.id, member)

        assert document["project"]["id"] == project.id
        assert {m["name"] for m in document["team"]} == {"Dr. Alex Chen", "Emma Rodriguez"}
        assert document["discussions"][0]["author"] == "Dr. Alex Chen"
        assert document["discussions"][0]["comments"][0]["author"] == "Emma Rodriguez"
        assert document["discussions"][0]["consensus"]["level"] == "pending"

    async def test_anonymized_document(self, session, hub):
        lead = await make_user(session, "Dr. Alex Chen", institution="MGH")
        project = await make_project(session, lead)

        document = await ExportService(session, hub).build(project.id, lead, anonymize=True)

        assert document["team"][0]["name"] == "Member 1"
        assert document["team"][0]["institution"] is None
        assert document["project"]["lead_id"] is None
        assert "Dr. Alex Chen" not in render_csv(document)

    async def test_outsiders_cannot_export(self, session, hub):
        lead = await make_user(session, "Dr. Alex Chen")
        outsider = await make_user(session, "Dr. Sarah Johnson")
        project = await make_project(session, lead)

        with pytest.raises(PermissionDeniedError):
            await ExportService(session, hub).build(project.id, outsider)
