"""
Motion-state derivation.

Maps a position report to the label published on ``warema/<snr>/state``.
Position 0 is fully open, 100 fully closed.
"""

from typing import Optional

from warema_mqtt.schemas import MotionState


def derive_motion_state(position: int, previous: Optional[int], moving: bool) -> MotionState:
    """
    Derive the motion label for a position report.

    Moving:
        direction from the previous position (closing when the value grows);
        when there is no previous position or it did not change, 0 reads as
        opening and anything else as closing.
    Not moving:
        0 -> open, 100 -> closed, otherwise stopped.

    Examples:
        >>> derive_motion_state(50, None, moving=True)
        <MotionState.CLOSING: 'closing'>
        >>> derive_motion_state(50, 0, moving=False)
        <MotionState.STOPPED: 'stopped'>
    """
    if moving:
        if previous is not None and position > previous:
            return MotionState.CLOSING
        if previous is not None and position < previous:
            return MotionState.OPENING
        if position == 0:
            return MotionState.OPENING
        # TODO: intermediate positions default to closing without any signal
        # for it; revisit once the stick reports a direction bit.
        return MotionState.CLOSING

    if position == 0:
        return MotionState.OPEN
    if position == 100:
        return MotionState.CLOSED
    return MotionState.STOPPED
