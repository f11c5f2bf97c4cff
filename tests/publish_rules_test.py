"""
Tests for the publish flag state machine
"""

from datetime import UTC, datetime, timedelta

from blog_service.service import publish_changes

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
EARLIER = NOW - timedelta(days=30)


class TestPublishChanges:
    def test_draft_to_published_stamps_now(self):
        assert publish_changes(True, None, NOW) == {"published": True, "published_at": NOW}

    def test_republish_keeps_original_stamp(self):
        assert publish_changes(True, EARLIER, NOW) == {"published": True}

    def test_unpublish_clears_stamp(self):
        assert publish_changes(False, EARLIER, NOW) == {
            "published": False,
            "published_at": None,
        }

    def test_draft_to_draft_still_clears(self):
        assert publish_changes(False, None, NOW) == {
            "published": False,
            "published_at": None,
        }
