"""
Canonical workflow types (``billing_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for document status state machines.  Used by the
invoice, purchase and quotation modules so that Guard, Transition and
Workflow are defined once, and so that "which actions does this status
offer" is answered by one function.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from billing_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the calling service
    reports which guards it found satisfied.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"{self.name}: initial state '{self.initial_state}' is not a declared state"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"{self.name}: transition {t.from_state}->{t.to_state} "
                    f"references an undeclared state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"{self.name}: terminal state '{t.from_state}' has an outgoing transition"
                )

    def available_actions(self, state: str) -> tuple[str, ...]:
        """Actions offered from ``state``, in declaration order, without duplicates."""
        seen: list[str] = []
        for t in self.transitions:
            if t.from_state == state and t.action not in seen:
                seen.append(t.action)
        return tuple(seen)

    def can(self, state: str, action: str) -> bool:
        return action in self.available_actions(state)

    def resolve(
        self,
        state: str,
        action: str,
        satisfied_guards: Iterable[str] = (),
    ) -> Transition:
        """
        Pick the transition ``action`` triggers from ``state``.

        Guarded transitions win when their guard is satisfied; otherwise
        the unguarded transition for the action applies.

        Raises:
            InvalidTransitionError: If no transition matches.
        """
        satisfied = frozenset(satisfied_guards)
        candidates = [
            t for t in self.transitions
            if t.from_state == state and t.action == action
        ]
        for t in candidates:
            if t.guard is not None and t.guard.name in satisfied:
                return t
        for t in candidates:
            if t.guard is None:
                return t
        raise InvalidTransitionError(self.name, state, action)
