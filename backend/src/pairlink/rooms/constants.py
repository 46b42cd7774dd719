"""Timing and namespace constants shared by the room engine."""

ROOM_TIMEOUT_SECONDS = 30.0
CLEANUP_INTERVAL_SECONDS = 10.0

# Six digit codes keep collisions rare while the registry stays far below
# 900k live rooms. Shrinking the range changes the allocator retry profile.
ROOM_ID_MIN = 100_000
ROOM_ID_MAX = 999_999

NORMAL_CLOSURE = 1000
