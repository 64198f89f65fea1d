"""
Discussion service.

Covers discussions and everything that hangs off them: votes (with consensus
evaluation), evidence links, threaded comments, reactions and @mentions.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import (
    Comment,
    Discussion,
    DiscussionVote,
    EvidenceLink,
    User,
)
from thoraxlab.core.database.repositories.comments import CommentReactionRepository, CommentRepository
from thoraxlab.core.database.repositories.discussions import (
    DiscussionRepository,
    DiscussionVoteRepository,
    EvidenceRepository,
)
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import DiscussionType, NotificationType, ReactionType, TeamRole, VoteType
from thoraxlab.core.models.io import (
    CommentCreate,
    CommentRead,
    CommentUpdate,
    DiscussionCreate,
    DiscussionDetail,
    DiscussionRead,
    DiscussionUpdate,
    EvidenceCreate,
    EvidenceRead,
    ReactionResult,
    VoteResult,
)
from thoraxlab.server.services.access import get_discussion, get_project, is_manager, require_member
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.consensus import ConsensusService
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import RealtimeHub, get_hub

logger = get_logger(__name__)

CONTRIBUTORS = (TeamRole.lead, TeamRole.admin, TeamRole.contributor)

_MENTION_RE = re.compile(r"@([A-Za-z0-9_.\-]+)")


def extract_mentions(text: str) -> Set[str]:
    """Return the lowercased handles mentioned as ``@handle`` in ``text``."""
    return {handle.lower().rstrip(".") for handle in _MENTION_RE.findall(text or "")}


def resolve_mentions(handles: Iterable[str], members: Iterable[User]) -> List[str]:
    """
    Match mention handles against team members.

    A handle matches a member's email local part or their name with spaces
    removed, case-insensitively.

    Returns:
        Ids of the mentioned members, in team order
    """
    wanted = set(handles)
    matched: List[str] = []
    for user in members:
        aliases = {user.email.split("@", 1)[0].lower(), user.name.replace(" ", "").lower()}
        if aliases & wanted and user.id not in matched:
            matched.append(user.id)
    return matched


class DiscussionService:
    """Service for discussions, votes, evidence and comments."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.hub = hub or get_hub()
        self.repo = DiscussionRepository(session)
        self.votes = DiscussionVoteRepository(session)
        self.evidence = EvidenceRepository(session)
        self.comments = CommentRepository(session)
        self.reactions = CommentReactionRepository(session)
        self.team = ProjectTeamRepository(session)
        self.notifications = NotificationService(session, self.hub)
        self.activity = ActivityService(session)
        self.consensus = ConsensusService(session, self.hub)

    async def _team_users(self, project_id: str) -> List[User]:
        return [user for _, user in await self.team.list_team(project_id)]

    async def _touch_project(self, project_id: str) -> None:
        project = await get_project(self.session, project_id)
        project.updated_at = utc_now()
        self.session.add(project)
        await self.session.commit()

    # ------------------------------------------------------------------
    # Discussions
    # ------------------------------------------------------------------

    async def list(
        self,
        project_id: str,
        user: User,
        page: int,
        limit: int,
        discussion_type: Optional[DiscussionType] = None,
        tag: Optional[str] = None,
        author_id: Optional[str] = None,
    ) -> Tuple[List[Discussion], int]:
        await require_member(self.session, project_id, user.id)
        return await self.repo.list_page(project_id, page, limit, discussion_type, author_id, tag)

    async def create(self, project_id: str, data: DiscussionCreate, user: User) -> Discussion:
        """
        Start a discussion in a project.

        Mentioned members get a ``mention`` notification; every other team
        member gets ``discussion_new``. ``discussion:created`` is broadcast to
        the project room.
        """
        project, _ = await require_member(self.session, project_id, user.id, CONTRIBUTORS, "start discussions")
        discussion = await self.repo.create(
            Discussion(
                project_id=project_id,
                author_id=user.id,
                title=data.title,
                content=data.content,
                discussion_type=data.discussion_type,
                tags=data.tags,
            )
        )
        await self._touch_project(project_id)
        await self.activity.log(
            user.id,
            "discussion_created",
            project_id,
            "discussion",
            discussion.id,
            {"title": discussion.title, "type": discussion.discussion_type.value},
        )

        members = await self._team_users(project_id)
        mentioned = [uid for uid in resolve_mentions(extract_mentions(data.content), members) if uid != user.id]
        payload = {"project_id": project_id, "discussion_id": discussion.id}
        await self.notifications.notify_many(
            mentioned,
            NotificationType.mention,
            f"{user.name} mentioned you",
            f'You were mentioned in "{discussion.title}".',
            data=payload,
        )
        await self.notifications.notify_many(
            [m.id for m in members if m.id not in mentioned],
            NotificationType.discussion_new,
            "New discussion",
            f'{user.name} started "{discussion.title}" in {project.title}.',
            data=payload,
            exclude=user.id,
        )
        await self.hub.send_to_project(
            project_id, "discussion:created", DiscussionRead.model_validate(discussion).model_dump(mode="json")
        )
        return discussion

    async def get(self, discussion_id: str, user: User) -> DiscussionDetail:
        """Return the full discussion view and count the view."""
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id)
        discussion.view_count += 1
        self.session.add(discussion)
        await self.session.commit()
        await self.session.refresh(discussion)

        own_vote = await self.votes.get_vote(discussion.id, user.id)
        return DiscussionDetail(
            discussion=DiscussionRead.model_validate(discussion),
            comments=await self.list_comments_for(discussion),
            evidence=[EvidenceRead.model_validate(e) for e in await self.evidence.list_for_discussion(discussion.id)],
            consensus=await self.consensus.consensus_for(discussion),
            user_vote=own_vote.vote if own_vote else None,
        )

    async def update(self, discussion_id: str, data: DiscussionUpdate, user: User) -> Discussion:
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id)
        if discussion.author_id != user.id:
            raise PermissionDeniedError("Only the author can edit a discussion")
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(discussion, field, value)
        discussion.updated_at = utc_now()
        discussion = await self.repo.update(discussion)
        await self.hub.send_to_project(
            discussion.project_id, "discussion:updated", DiscussionRead.model_validate(discussion).model_dump(mode="json")
        )
        return discussion

    async def delete(self, discussion_id: str, user: User) -> None:
        discussion = await get_discussion(self.session, discussion_id)
        _, membership = await require_member(self.session, discussion.project_id, user.id)
        if discussion.author_id != user.id and not is_manager(membership):
            raise PermissionDeniedError("Only the author or a project lead/admin can delete a discussion")
        project_id = discussion.project_id
        await self.repo.delete(discussion.id)
        await self.activity.log(user.id, "discussion_deleted", project_id, "discussion", discussion_id)
        await self.hub.send_to_project(project_id, "discussion:deleted", {"discussion_id": discussion_id})

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    async def vote(self, discussion_id: str, vote: VoteType, user: User) -> VoteResult:
        """
        Cast, switch or withdraw the caller's vote.

        Casting the same vote again removes it; a different vote replaces it.
        Cached tallies are recomputed from the vote rows, then the consensus is
        re-evaluated and ``discussion:vote:update`` is broadcast.
        """
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id, action="vote")

        existing = await self.votes.get_vote(discussion.id, user.id)
        if existing is None:
            await self.votes.create(DiscussionVote(discussion_id=discussion.id, user_id=user.id, vote=vote))
            user_vote: Optional[VoteType] = vote
        elif existing.vote == vote:
            await self.session.delete(existing)
            await self.session.commit()
            user_vote = None
        else:
            existing.vote = vote
            existing.updated_at = utc_now()
            await self.votes.update(existing)
            user_vote = vote

        discussion.upvotes, discussion.downvotes = await self.votes.tally(discussion.id)
        consensus, decision = await self.consensus.evaluate(discussion, user.id)

        result = VoteResult(
            discussion_id=discussion.id,
            upvotes=discussion.upvotes,
            downvotes=discussion.downvotes,
            user_vote=user_vote,
            total_votes=discussion.upvotes + discussion.downvotes,
            consensus=consensus,
            decision_id=decision.id if decision else None,
        )
        await self.activity.log(
            user.id, "discussion_voted", discussion.project_id, "discussion", discussion.id, {"vote": user_vote.value if user_vote else None}
        )
        await self.hub.send_to_project(
            discussion.project_id, "discussion:vote:update", result.model_dump(mode="json", exclude={"decision_id"})
        )
        return result

    async def remove_votes_of(self, project_id: str, user_id: str) -> None:
        """Drop a departing member's votes and re-evaluate the affected discussions."""
        for discussion in await self.repo.list_for_project(project_id):
            vote = await self.votes.get_vote(discussion.id, user_id)
            if vote is None:
                continue
            await self.session.delete(vote)
            await self.session.commit()
            discussion.upvotes, discussion.downvotes = await self.votes.tally(discussion.id)
            await self.consensus.evaluate(discussion, user_id)

    # ------------------------------------------------------------------
    # Evidence
    # ------------------------------------------------------------------

    async def list_evidence(self, discussion_id: str, user: User) -> List[EvidenceLink]:
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id)
        return await self.evidence.list_for_discussion(discussion.id)

    async def add_evidence(self, discussion_id: str, data: EvidenceCreate, user: User) -> EvidenceLink:
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id, CONTRIBUTORS, "add evidence")
        link = await self.evidence.create(
            EvidenceLink(discussion_id=discussion.id, added_by=user.id, **data.model_dump())
        )
        await self.activity.log(
            user.id, "evidence_added", discussion.project_id, "evidence", link.id, {"url": link.url}
        )
        await self.hub.send_to_project(
            discussion.project_id, "evidence:added", EvidenceRead.model_validate(link).model_dump(mode="json")
        )
        return link

    async def delete_evidence(self, evidence_id: str, user: User) -> None:
        link = await self.evidence.get_by_id(evidence_id)
        if link is None:
            raise NotFoundError("Evidence", evidence_id)
        discussion = await get_discussion(self.session, link.discussion_id)
        _, membership = await require_member(self.session, discussion.project_id, user.id)
        if link.added_by != user.id and not is_manager(membership):
            raise PermissionDeniedError("Only the person who added the evidence or a project lead/admin can remove it")
        await self.evidence.delete(evidence_id)
        await self.hub.send_to_project(
            discussion.project_id, "evidence:removed", {"evidence_id": evidence_id, "discussion_id": discussion.id}
        )

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def list_comments_for(self, discussion: Discussion) -> List[CommentRead]:
        comments = await self.comments.list_for_discussion(discussion.id)
        counts = await self.reactions.counts([c.id for c in comments])
        return [CommentRead.model_validate(c).model_copy(update={"reactions": counts.get(c.id, {})}) for c in comments]

    async def list_comments(self, discussion_id: str, user: User) -> List[CommentRead]:
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id)
        return await self.list_comments_for(discussion)

    async def add_comment(self, discussion_id: str, data: CommentCreate, user: User) -> Comment:
        """
        Add a comment or reply to a discussion.

        Notifies the discussion author, the parent comment's author and any
        mentioned members, never the commenter. ``comment:added`` is broadcast.
        """
        discussion = await get_discussion(self.session, discussion_id)
        await require_member(self.session, discussion.project_id, user.id, CONTRIBUTORS, "comment")

        parent: Optional[Comment] = None
        if data.parent_id:
            parent = await self.comments.get_by_id(data.parent_id)
            if parent is None or parent.discussion_id != discussion.id:
                raise ValidationError("Parent comment does not belong to this discussion")

        comment = await self.comments.create(
            Comment(discussion_id=discussion.id, author_id=user.id, parent_id=data.parent_id, content=data.content)
        )
        await self._touch_project(discussion.project_id)
        await self.activity.log(
            user.id, "comment_added", discussion.project_id, "comment", comment.id, {"discussion_id": discussion.id}
        )

        payload = {"project_id": discussion.project_id, "discussion_id": discussion.id, "comment_id": comment.id}
        notified: Set[str] = {user.id}
        if parent is not None and parent.author_id not in notified:
            await self.notifications.notify(
                parent.author_id,
                NotificationType.comment_reply,
                "New reply",
                f'{user.name} replied to your comment in "{discussion.title}".',
                data=payload,
            )
            notified.add(parent.author_id)
        if discussion.author_id not in notified:
            await self.notifications.notify(
                discussion.author_id,
                NotificationType.comment_new,
                "New comment",
                f'{user.name} commented on "{discussion.title}".',
                data=payload,
            )
            notified.add(discussion.author_id)
        members = await self._team_users(discussion.project_id)
        mentioned = [uid for uid in resolve_mentions(extract_mentions(data.content), members) if uid not in notified]
        await self.notifications.notify_many(
            mentioned,
            NotificationType.mention,
            f"{user.name} mentioned you",
            f'You were mentioned in a comment on "{discussion.title}".',
            data=payload,
        )

        await self.hub.send_to_project(
            discussion.project_id, "comment:added", CommentRead.model_validate(comment).model_dump(mode="json")
        )
        return comment

    async def _comment_with_membership(self, comment_id: str, user: User):
        comment = await self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        discussion = await get_discussion(self.session, comment.discussion_id)
        _, membership = await require_member(self.session, discussion.project_id, user.id)
        return comment, discussion, membership

    async def edit_comment(self, comment_id: str, data: CommentUpdate, user: User) -> Comment:
        comment, discussion, _ = await self._comment_with_membership(comment_id, user)
        if comment.author_id != user.id:
            raise PermissionDeniedError("Only the author can edit a comment")
        comment.content = data.content
        comment.is_edited = True
        comment.updated_at = utc_now()
        comment = await self.comments.update(comment)
        await self.hub.send_to_project(
            discussion.project_id, "comment:updated", CommentRead.model_validate(comment).model_dump(mode="json")
        )
        return comment

    async def delete_comment(self, comment_id: str, user: User) -> None:
        comment, discussion, membership = await self._comment_with_membership(comment_id, user)
        if comment.author_id != user.id and not is_manager(membership):
            raise PermissionDeniedError("Only the author or a project lead/admin can delete a comment")
        await self.comments.delete(comment.id)
        await self.hub.send_to_project(
            discussion.project_id, "comment:deleted", {"comment_id": comment_id, "discussion_id": discussion.id}
        )

    async def react(self, comment_id: str, reaction: ReactionType, user: User) -> ReactionResult:
        """Toggle the caller's reaction on a comment and return the new counts."""
        comment, _, _ = await self._comment_with_membership(comment_id, user)
        active = await self.reactions.toggle(comment.id, user.id, reaction)
        counts: Dict[str, int] = (await self.reactions.counts([comment.id])).get(comment.id, {})
        return ReactionResult(comment_id=comment.id, reaction=reaction, active=active, reactions=counts)

