"""Domain enums for ThoraxLab models."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Professional background of a user.

    Consensus is tallied separately for clinicians and industry members.
    """

    clinician = "clinician"
    industry = "industry"
    public = "public"


class TeamRole(str, Enum):
    """Role of a user inside a single project team."""

    lead = "lead"
    admin = "admin"
    contributor = "contributor"
    viewer = "viewer"


class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""

    planning = "planning"
    active = "active"
    review = "review"
    completed = "completed"
    archived = "archived"  # Hidden from listings and search.


class ProjectType(str, Enum):
    """Which side of the collaboration drives a project."""

    clinical = "clinical"
    industry = "industry"
    collaborative = "collaborative"


class DiscussionType(str, Enum):
    """Kind of discussion thread."""

    brainstorm = "brainstorm"
    question = "question"
    decision = "decision"  # Produces a Decision once consensus is high.
    insight = "insight"


class VoteType(str, Enum):
    """A team member's vote on a discussion."""

    up = "up"
    down = "down"


class ConsensusLevel(str, Enum):
    """Thresholded consensus of a discussion."""

    pending = "pending"
    low = "low"
    medium = "medium"
    high = "high"


class EvidenceSourceType(str, Enum):
    """Where an evidence link points to."""

    pubmed = "pubmed"
    doi = "doi"
    clinical_trial = "clinical_trial"
    guideline = "guideline"
    article = "article"
    other = "other"


class EvidenceStrength(str, Enum):
    """Confidence the team places in a piece of evidence."""

    strong = "strong"
    moderate = "moderate"
    weak = "weak"
    inconclusive = "inconclusive"


class ReactionType(str, Enum):
    """Reactions a user can toggle on a comment."""

    like = "like"
    helpful = "helpful"
    insightful = "insightful"
    question = "question"


class DecisionStatus(str, Enum):
    """Resolution state of a decision."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    deferred = "deferred"


class DecisionPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class DecisionOrigin(str, Enum):
    """How a decision came to exist."""

    consensus = "consensus"
    manual = "manual"


class DecisionVoteType(str, Enum):
    approve = "approve"
    reject = "reject"
    abstain = "abstain"


class NotificationPriority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"


class NotificationType(str, Enum):
    """Categories of user notifications."""

    welcome = "welcome"
    project_created = "project_created"
    project_updated = "project_updated"
    team_added = "team_added"
    discussion_new = "discussion_new"
    mention = "mention"
    comment_new = "comment_new"
    comment_reply = "comment_reply"
    consensus_reached = "consensus_reached"
    decision_created = "decision_created"
    decision_resolved = "decision_resolved"


class SearchType(str, Enum):
    all = "all"
    projects = "projects"
    discussions = "discussions"
    users = "users"


class ExportFormat(str, Enum):
    json = "json"
    csv = "csv"
