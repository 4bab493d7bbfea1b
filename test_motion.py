"""
Motion-state derivation tests.
"""

import pytest

from warema_mqtt.schemas import MotionState
from warema_bridge.motion import derive_motion_state


@pytest.mark.parametrize("position, previous, moving, expected", [
    (60, 40, True, MotionState.CLOSING),
    (20, 40, True, MotionState.OPENING),
    (0, None, True, MotionState.OPENING),
    (0, 0, True, MotionState.OPENING),
    (100, 100, True, MotionState.CLOSING),
    (50, None, True, MotionState.CLOSING),
    (50, 50, True, MotionState.CLOSING),
    (0, 30, False, MotionState.OPEN),
    (100, 30, False, MotionState.CLOSED),
    (50, 30, False, MotionState.STOPPED),
    (0, None, False, MotionState.OPEN),
])
def test_motion_state_table(position, previous, moving, expected):
    assert derive_motion_state(position, previous, moving) == expected


def test_direction_wins_over_endpoints_while_moving():
    """A blind moving towards 0 from above is opening, even at 100 → 0 jumps."""
    assert derive_motion_state(0, 100, True) == MotionState.OPENING
    assert derive_motion_state(100, 0, True) == MotionState.CLOSING
