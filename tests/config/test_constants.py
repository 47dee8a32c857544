from speaker_listener.config.constants import (
    LISTENER_OBS_BASE_SIZE,
    MAX_RESAMPLE_TRIES,
    MOVE_ACTION_COUNT,
    PLACEMENT_ATTEMPTS,
    PRESS_ACTION_COUNT,
    SILENCE_TOKEN,
    SLOT_COUNT,
    SLOT_FEATURE_SIZE,
    SPEAKER_OBS_BASE_SIZE,
    STEP_BUDGET,
    VOCAB_SIZE,
)


def test_slot_count_is_three() -> None:
    assert SLOT_COUNT == 3


def test_listener_base_size_matches_layout() -> None:
    assert SLOT_FEATURE_SIZE == 10
    assert LISTENER_OBS_BASE_SIZE == 32


def test_speaker_base_size_matches_layout() -> None:
    assert SPEAKER_OBS_BASE_SIZE == 7


def test_action_branch_sizes() -> None:
    assert MOVE_ACTION_COUNT == 5
    assert PRESS_ACTION_COUNT == SLOT_COUNT + 1


def test_silence_token_inside_default_vocabulary() -> None:
    assert isinstance(VOCAB_SIZE, int) and VOCAB_SIZE > 0
    assert 0 <= SILENCE_TOKEN < VOCAB_SIZE


def test_retry_budgets_are_positive() -> None:
    assert MAX_RESAMPLE_TRIES >= 50
    assert PLACEMENT_ATTEMPTS == 200


def test_step_budget() -> None:
    assert STEP_BUDGET == 300
