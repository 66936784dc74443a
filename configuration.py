from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from errors import StackInvariantError
from transitions import EPSILON_CHAR, Transition

DEFAULT_BOTTOM_MARKER = "Z"


class NoMemory:
    """Memory capability of a finite-state automaton: every rule is
    permitted and applying one leaves nothing behind."""

    def permits(self, transition: Transition) -> bool:
        return True

    def apply(self, transition: Transition) -> None:
        pass

    def is_empty(self) -> bool:
        return True


class MemoryStack:
    """The single stack of a pushdown automaton.

    The stack is a list whose last element is the top. It starts holding
    only `bottom`, and that marker can only be popped by a move that pushes
    it straight back (e.g. pop `Z`, push `Z...`).
    """

    def __init__(self, bottom: str = DEFAULT_BOTTOM_MARKER):
        self.bottom = bottom
        self._symbols: List[str] = [bottom]

    def __len__(self):
        return len(self._symbols)

    def __str__(self):
        return "".join(self._symbols)

    @property
    def top(self) -> str:
        if not self._symbols:
            raise StackInvariantError("memory stack is empty, the bottom marker was lost")
        return self._symbols[-1]

    def only_bottom(self) -> bool:
        return len(self._symbols) == 1

    def is_empty(self) -> bool:
        """True when nothing but the bottom marker is left."""
        return self.only_bottom()

    def permits(self, transition: Transition) -> bool:
        if transition.pop is None:
            return True
        if transition.pop != self.top:
            return False
        if self.only_bottom():
            return transition.push.startswith(self.bottom)
        return True

    def apply(self, transition: Transition) -> None:
        if transition.pop is not None:
            self._symbols.pop()
        if transition.push:
            self._symbols.extend(transition.push)
        if not self._symbols:
            raise StackInvariantError(
                f"memory stack became empty after applying {transition}"
            )

    def snapshot(self) -> Tuple[str, ...]:
        return tuple(self._symbols)


@dataclass
class Configuration:
    """Snapshot of a running automaton: current state, input still to be
    read and the memory (a `NoMemory` for finite-state automata)."""

    state: Any
    remaining: str
    memory: Any = field(default_factory=NoMemory)
    steps: int = 0

    @property
    def has_memory(self) -> bool:
        return isinstance(self.memory, MemoryStack)

    def input_consumed(self) -> bool:
        # a pushdown run may leave `&` padding behind, a finite-state run may not
        if self.has_memory:
            return all(c == EPSILON_CHAR for c in self.remaining)
        return self.remaining == ""

    def next_symbol(self) -> Optional[str]:
        return self.remaining[0] if self.remaining else None

    def snapshot(self) -> Tuple:
        if self.has_memory:
            return (self.state, self.remaining, self.memory.snapshot())
        return (self.state, self.remaining)

    def __str__(self):
        remaining = self.remaining or EPSILON_CHAR
        if self.has_memory:
            return f"<{self.state}, {remaining}, {self.memory}>"
        return f"<{self.state}, {remaining}>"
