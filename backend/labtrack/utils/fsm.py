from __future__ import annotations
"""Finite state machine utility for enforcing allowed status transitions.

Usage:
    from labtrack.utils.fsm import TransitionValidator
    REPAIR_FSM = TransitionValidator({
        'quote-pending': {'repair-pending', 'completed'},
        'repair-pending': {'completed'},
        'completed': set(),
    })
    REPAIR_FSM.assert_can_transition(current_status, target_status)

A state with no outgoing edges is terminal. Raises ValidationError (400) if the
transition is not an edge of the graph.
"""
from typing import Dict, Iterable, Set
from labtrack.errors import ValidationError


class TransitionValidator:
    def __init__(self, graph: Dict[str, Iterable[str]], field_name: str = 'status'):
        self.graph: Dict[str, Set[str]] = {str(k): {str(t) for t in v} for k, v in graph.items()}
        self.field_name = field_name
        unknown = set().union(*self.graph.values()) - set(self.graph)
        assert not unknown, f"transition targets without a state entry: {sorted(unknown)}"

    @property
    def states(self) -> Set[str]:
        return set(self.graph)

    def is_terminal(self, state: str) -> bool:
        return not self.graph.get(str(state))

    def can_transition(self, current: str, target: str) -> bool:
        return str(target) in self.graph.get(str(current), set())

    def assert_can_transition(self, current: str, target: str):
        if str(current) not in self.graph:
            raise ValidationError(description=f"Unknown {self.field_name} {current}")
        if self.is_terminal(current):
            raise ValidationError(description=f"{self.field_name} {current} is terminal; no further transitions")
        if not self.can_transition(current, target):
            raise ValidationError(description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

__all__ = ['TransitionValidator']
