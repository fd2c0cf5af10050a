"""
Pytest configuration and fixtures

The analytics services are pure functions over in-memory records, so
tests need no database or network. Record factories live in
fixtures/case_fixtures.py.
"""
import pytest
import sys
import os
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fixtures.case_fixtures import make_child, make_goal, improving_sessions, declining_sessions


@pytest.fixture
def child():
    """A child with no stored trend yet."""
    return make_child("c1", name="Sky Kim", guardian_name="Younghee Kim", notes="More eye contact lately.")


@pytest.fixture
def goals():
    """Two active goals and one paused goal for child c1."""
    return [
        make_goal("g1", title="Requesting", category="Communication", target_criteria="80% over 5 sessions"),
        make_goal("g2", title="Eye contact", category="Social"),
        make_goal("g3", title="Waiting turn", category="Social", status="paused"),
    ]


@pytest.fixture
def improving():
    """Eight sessions for c1 with g1 climbing from 50% to 90%."""
    return improving_sessions()


@pytest.fixture
def declining():
    """Eight sessions for c2 dropping from 80% to 40%."""
    return declining_sessions()


@pytest.fixture
def period():
    return date(2025, 1, 1), date(2025, 1, 31)
