"""
Canonical workflow types (``procure_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for document state machines (indent review, purchase
orders), plus the lookup used to resolve an action to a transition.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``initial_state`` and every transition endpoint are members of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass

from procure_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning service does.
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
    """A state machine definition for a document lifecycle."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name!r}: initial state {self.initial_state!r} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name!r}: transition {t.action!r} "
                    f"references unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name!r}: terminal state {t.from_state!r} "
                    f"has outgoing transition {t.action!r}"
                )

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def find_transition(self, from_state: str, action: str) -> Transition:
        """Resolve ``action`` from ``from_state``.

        Raises:
            InvalidTransitionError: if no transition matches.
        """
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        raise InvalidTransitionError(self.name, from_state, action)
