from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Usage:
    from repairdesk.utils.fsm import TransitionValidator
    ORDER_FSM = TransitionValidator({
        'Pendiente': {'En Reparación'},
        'En Reparación': {'Terminado', 'Pendiente'},
        'Terminado': {'Pendiente'},
    })
    ORDER_FSM.assert_can_transition(current_status, target_status)
    ORDER_FSM.sources('Terminado')  # statuses a guarded update may match

Raises InvalidTransition (409) if invalid.
"""
from typing import Dict, Set
from repairdesk.errors import InvalidTransition

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidTransition(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def sources(self, target: str) -> Set[str]:
        """Every state with an edge into target."""
        return {state for state, targets in self.graph.items() if target in targets}

__all__ = ['TransitionValidator']
