"""Unit tests for the consensus computation.

Tests cover the role agreement percentages, the level thresholds and the rule
that only votes of current team members count.
"""

import pytest

from thoraxlab.core.models.domain import ConsensusLevel, UserRole, VoteType
from thoraxlab.server.services.consensus import Thresholds, compute_consensus, level_for

THRESHOLDS = Thresholds(medium=50, high=75)

TEAM = [
    ("c1", UserRole.clinician),
    ("c2", UserRole.clinician),
    ("i1", UserRole.industry),
    ("p1", UserRole.public),
]


class TestLevelFor:
    """Test the agreement to level mapping."""

    @pytest.mark.parametrize(
        "agreement,expected",
        [
            (100, ConsensusLevel.high),
            (75, ConsensusLevel.high),
            (74, ConsensusLevel.medium),
            (50, ConsensusLevel.medium),
            (49, ConsensusLevel.low),
            (0, ConsensusLevel.low),
        ],
    )
    def test_thresholds(self, agreement, expected):
        assert level_for(agreement, THRESHOLDS) == expected

    def test_custom_thresholds(self):
        assert level_for(60, Thresholds(medium=40, high=60)) == ConsensusLevel.high


class TestComputeConsensus:
    """Test compute_consensus."""

    def test_no_votes_is_pending(self):
        result = compute_consensus(TEAM, {}, THRESHOLDS)

        assert result.level == ConsensusLevel.pending
        assert result.total_votes == 0
        assert result.team_size == 4
        assert result.clinical_agreement == 0
        assert result.industry_agreement == 0
        assert result.participation == 0

    def test_role_agreement_percentages(self):
        votes = {"c1": VoteType.up, "c2": VoteType.down, "i1": VoteType.up}

        result = compute_consensus(TEAM, votes, THRESHOLDS)

        assert result.upvotes == 2
        assert result.downvotes == 1
        assert result.clinical_agreement == 50
        assert result.industry_agreement == 100
        assert result.overall_agreement == 50
        assert result.participation == 75
        assert result.clinical_votes == 2
        assert result.industry_votes == 1

    def test_level_uses_lowest_role_agreement(self):
        votes = {"c1": VoteType.up, "c2": VoteType.down, "i1": VoteType.up}

        result = compute_consensus(TEAM, votes, THRESHOLDS)

        # clinical 50, industry 100 -> medium
        assert result.level == ConsensusLevel.medium

    def test_all_up_is_high(self):
        votes = {"c1": VoteType.up, "c2": VoteType.up, "i1": VoteType.up}

        result = compute_consensus(TEAM, votes, THRESHOLDS)

        assert result.level == ConsensusLevel.high
        assert result.overall_agreement == 75

    def test_missing_role_is_null(self):
        team = [("c1", UserRole.clinician), ("c2", UserRole.clinician)]

        result = compute_consensus(team, {"c1": VoteType.up}, THRESHOLDS)

        assert result.industry_agreement is None
        assert result.clinical_agreement == 50
        assert result.level == ConsensusLevel.medium

    def test_overall_used_when_no_roles_present(self):
        team = [("p1", UserRole.public), ("p2", UserRole.public)]

        result = compute_consensus(team, {"p1": VoteType.up, "p2": VoteType.up}, THRESHOLDS)

        assert result.clinical_agreement is None
        assert result.industry_agreement is None
        assert result.overall_agreement == 100
        assert result.level == ConsensusLevel.high

    def test_votes_of_non_members_are_ignored(self):
        votes = {"c1": VoteType.up, "former": VoteType.up, "stranger": VoteType.down}

        result = compute_consensus(TEAM, votes, THRESHOLDS)

        assert result.total_votes == 1
        assert result.total_votes <= result.team_size
        assert result.upvotes == 1
        assert result.downvotes == 0

    def test_empty_team(self):
        result = compute_consensus([], {"x": VoteType.up}, THRESHOLDS)

        assert result.team_size == 0
        assert result.level == ConsensusLevel.pending
        assert result.overall_agreement == 0

    def test_default_thresholds_come_from_settings(self):
        team = [("c1", UserRole.clinician), ("i1", UserRole.industry)]

        result = compute_consensus(team, {"c1": VoteType.up, "i1": VoteType.up})

        assert result.level == ConsensusLevel.high
