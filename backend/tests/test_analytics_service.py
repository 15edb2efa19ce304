from datetime import timedelta

import pytest

from shoplocal.errors import NoActiveSeason, NotFound
from shoplocal.services import analytics_service, checkin_service, reward_service
from shoplocal.services.board import FREE_SPACE_INDEX

from conftest import FIXED_NOW, TEST_SECRET, location_at, token_for


def visit(user, location_id, now=FIXED_NOW, token_date="2026-03-04"):
    return checkin_service.check_in(
        user.id, token_for(location_id, token_date), "device", secret=TEST_SECRET, now=now
    )


class TestSeasonAnalytics:

    def test_requires_active_season(self, db_session):
        with pytest.raises(NoActiveSeason):
            analytics_service.season_analytics()

    def test_unknown_season(self, season):
        with pytest.raises(NotFound):
            analytics_service.season_analytics(season.id + 100)

    def test_empty_season(self, season):
        stats = analytics_service.season_analytics()
        assert stats["season_id"] == season.id
        assert stats["board_completions"] == 0
        assert stats["rewards_issued"] == 0
        assert len(stats["location_analytics"]) == 24
        assert all(row["total_check_ins"] == 0 for row in stats["location_analytics"])

    def test_counts(self, season, player, other_player):
        busy = location_at(season, 0)
        visit(player, busy)
        visit(player, busy, now=FIXED_NOW + timedelta(days=1), token_date="2026-03-05")
        visit(other_player, busy)

        # player finishes the board
        for index in range(1, 25):
            if index != FREE_SPACE_INDEX:
                visit(player, location_at(season, index))

        row_reward = next(
            r for r in reward_service.list_user_rewards(player.id) if r["reward_type"] == "ROW"
        )
        reward_service.redeem(row_reward["id"], player.id)

        stats = analytics_service.season_analytics(season.id)

        by_location = {row["location_id"]: row for row in stats["location_analytics"]}
        assert by_location[busy]["total_check_ins"] == 3
        assert by_location[busy]["unique_users"] == 2
        assert by_location[busy]["repeat_check_ins"] == 1

        assert stats["board_completions"] == 1
        assert stats["row_completions"] == 5
        assert stats["rewards_issued"] == 6
        assert stats["rewards_redeemed"] == 1
        assert stats["raffle_entries"] == 1
