from labtrack.errors import ValidationError
from labtrack.utils.fsm import TransitionValidator
import pytest


def test_transition_validator_allows_valid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    assert fsm.assert_can_transition('A', 'B') is True


def test_transition_validator_blocks_invalid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    with pytest.raises(ValidationError):
        fsm.assert_can_transition('A', 'C')


def test_terminal_and_unknown_states():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()}, field_name='state')
    with pytest.raises(ValidationError) as exc:
        fsm.assert_can_transition('B', 'A')
    assert 'terminal' in exc.value.description
    with pytest.raises(ValidationError):
        fsm.assert_can_transition('Z', 'A')
    assert fsm.states == {'A', 'B'}


def test_graph_targets_must_be_states():
    with pytest.raises(AssertionError):
        TransitionValidator({'A': {'B'}})
