"""
Unit tests for Decline Alert Scanner
"""

from fixtures.case_fixtures import make_child, make_series
from services.case_records import group_sessions_by_child
from services.decline_alerts import declines_to_dict, scan_for_declines


class TestScanForDeclines:
    """Test center-wide decline detection."""

    def test_flags_recent_drop(self, declining):
        child = make_child("c2", name="Rain Park")

        alerts = scan_for_declines([child], {"c2": declining})

        assert len(alerts) == 1
        assert alerts[0].child == child
        assert alerts[0].recent_rate == 0.4
        assert alerts[0].older_rate == 0.8
        assert abs(alerts[0].change + 0.4) < 1e-9

    def test_improving_child_not_flagged(self, improving):
        assert scan_for_declines([make_child("c1")], {"c1": improving}) == []

    def test_needs_two_full_windows(self):
        """Three sessions cannot fill two 2-session windows."""
        sessions = make_series([9, 2, 2])

        assert scan_for_declines([make_child("c1")], {"c1": sessions}) == []

    def test_drop_at_threshold_not_flagged(self):
        """A 10-point drop is not more than the threshold."""
        sessions = make_series([8, 8, 7, 7])

        assert scan_for_declines([make_child("c1")], {"c1": sessions}) == []

    def test_child_without_sessions(self):
        assert scan_for_declines([make_child("c9")], {}) == []

    def test_wider_window(self, declining):
        """With 4-session windows the drop is diluted but still flagged."""
        alerts = scan_for_declines([make_child("c2")], {"c2": declining}, window_size=4)

        assert len(alerts) == 1
        assert alerts[0].recent_rate == 0.6

    def test_mixed_caseload(self, improving, declining):
        children = [make_child("c1"), make_child("c2", name="Rain Park")]

        alerts = scan_for_declines(children, group_sessions_by_child(improving + declining))

        assert [a.child.id for a in alerts] == ["c2"]

    def test_to_dict(self, declining):
        data = declines_to_dict(scan_for_declines([make_child("c2", name="Rain Park")], {"c2": declining}))

        assert data[0]["child_id"] == "c2"
        assert data[0]["child_name"] == "Rain Park"
        assert data[0]["recent_rate"] == 0.4
