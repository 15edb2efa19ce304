"""
Reward issuance and redemption tests.
"""

import pytest

from shoplocal.errors import Forbidden, NotFound, NotRedeemable
from shoplocal.models import IssuedReward, RaffleEntry, RewardDefinition
from shoplocal.services import reward_service

from conftest import FIXED_NOW


def definition_for(db_session, season, rule):
    return db_session.query(RewardDefinition).filter_by(season_id=season.id, rule=rule).one()


def issue(db_session, season, user, rule="ROW_0"):
    reward = reward_service.issue_reward_if_absent(
        user_id=user.id,
        season_id=season.id,
        definition=definition_for(db_session, season, rule),
        details={"rule": rule},
        now=FIXED_NOW,
    )
    db_session.commit()
    return reward


class TestIssuance:

    def test_issues_from_definition(self, db_session, season, player):
        reward = issue(db_session, season, player)
        assert reward.title == "Row 1 Reward"
        assert reward.reward_type == "ROW"
        assert reward.status == "AVAILABLE"
        assert reward.issued_at == FIXED_NOW

    def test_second_issue_is_skipped(self, db_session, season, player):
        issue(db_session, season, player)
        assert issue(db_session, season, player) is None
        assert db_session.query(IssuedReward).count() == 1

    def test_one_per_user(self, db_session, season, player, other_player):
        issue(db_session, season, player)
        assert issue(db_session, season, other_player) is not None

    def test_raffle_entry_once(self, db_session, season, player):
        first = reward_service.create_raffle_entry_if_absent(user_id=player.id, season_id=season.id, now=FIXED_NOW)
        second = reward_service.create_raffle_entry_if_absent(user_id=player.id, season_id=season.id, now=FIXED_NOW)
        db_session.commit()

        assert first is not None
        assert second is None
        assert db_session.query(RaffleEntry).count() == 1


class TestRedeem:

    def test_redeem(self, db_session, season, player):
        reward = issue(db_session, season, player)

        result = reward_service.redeem(reward.id, player.id, now=FIXED_NOW)

        assert result["redeemed"] is True
        assert result["already_redeemed"] is False
        assert result["reward"]["status"] == "REDEEMED"
        assert result["reward"]["redeemed_at"] == "2026-03-04T18:00:00Z"

    def test_redeem_twice_is_idempotent(self, db_session, season, player):
        reward = issue(db_session, season, player)
        reward_service.redeem(reward.id, player.id, now=FIXED_NOW)

        again = reward_service.redeem(reward.id, player.id)

        assert again["redeemed"] is True
        assert again["already_redeemed"] is True
        # First redemption time stands
        assert again["reward"]["redeemed_at"] == "2026-03-04T18:00:00Z"

    def test_repeat_redeem_releases_the_row_lock(self, db_session, season, player):
        reward = issue(db_session, season, player)
        reward_service.redeem(reward.id, player.id, now=FIXED_NOW)

        reward_service.redeem(reward.id, player.id)

        assert not db_session.in_transaction()

    def test_missing(self, db_session, player):
        with pytest.raises(NotFound):
            reward_service.redeem(999, player.id)

    def test_someone_elses_reward(self, db_session, season, player, other_player):
        reward = issue(db_session, season, player)
        with pytest.raises(Forbidden):
            reward_service.redeem(reward.id, other_player.id)

        db_session.refresh(reward)
        assert reward.status == "AVAILABLE"

    def test_raffle_is_not_redeemable(self, db_session, season, player):
        reward = issue(db_session, season, player, rule="BOARD_COMPLETE")
        assert reward.to_dict()["redeemable"] is False

        with pytest.raises(NotRedeemable):
            reward_service.redeem(reward.id, player.id)


class TestListing:

    def test_lists_only_own_rewards(self, db_session, season, player, other_player):
        issue(db_session, season, player, "ROW_0")
        issue(db_session, season, player, "ROW_1")
        issue(db_session, season, other_player, "ROW_0")

        rewards = reward_service.list_user_rewards(player.id)
        assert len(rewards) == 2
        assert {r["user_id"] for r in rewards} == {player.id}

    def test_season_filter(self, db_session, season, player):
        issue(db_session, season, player)
        assert reward_service.list_user_rewards(player.id, season_id=season.id)
        assert reward_service.list_user_rewards(player.id, season_id=season.id + 1) == []
