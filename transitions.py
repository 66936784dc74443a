from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from errors import MalformedAutomatonError

# Read/pop positions use None for "no symbol"; push strings use "".
EPSILON = None
EPSILON_CHAR = "&"
EPSILON_SYMBOLS = {EPSILON_CHAR, "ε", "eps", "epsilon", ""}


def is_epsilon(symbol: Any) -> bool:
    if symbol is None:
        return True
    return isinstance(symbol, str) and symbol.lower() in EPSILON_SYMBOLS


def _symbol_label(symbol: Optional[str]) -> str:
    return EPSILON_CHAR if symbol is None else symbol


@dataclass(frozen=True)
class Transition:
    """One move of the transition relation.

    A memoryless rule only sets `source`, `read` and `target`. A pushdown
    rule additionally pops `pop` (None: leave the stack alone) and pushes
    `push` (each character appended, the last one ends up on top).
    """

    source: Any
    read: Optional[str]
    target: Any
    pop: Optional[str] = None
    push: str = ""

    def __post_init__(self):
        read = None if is_epsilon(self.read) else self.read
        pop = None if is_epsilon(self.pop) else self.pop
        push = "" if is_epsilon(self.push) else self.push

        if read is not None and len(read) != 1:
            raise MalformedAutomatonError(
                f"Input symbol must be a single character, got '{read}'"
            )
        if pop is not None and len(pop) != 1:
            raise MalformedAutomatonError(
                f"Stack symbol to pop must be a single character, got '{pop}'"
            )

        object.__setattr__(self, "read", read)
        object.__setattr__(self, "pop", pop)
        object.__setattr__(self, "push", push)

    @classmethod
    def from_fields(cls, fields: Sequence[Any]) -> "Transition":
        """Build a rule from the 3-field (`state symbol state`) or the
        5-field (`state symbol pop push state`) tuple shape."""
        if len(fields) == 3:
            source, read, target = fields
            return cls(source, read, target)
        if len(fields) == 5:
            source, read, pop, push, target = fields
            return cls(source, read, target, pop=pop, push=push)
        raise MalformedAutomatonError(
            f"A transition has 3 or 5 fields, got {len(fields)}: {tuple(fields)}"
        )

    @property
    def is_epsilon(self) -> bool:
        return self.read is None

    @property
    def uses_memory(self) -> bool:
        return self.pop is not None or self.push != ""

    def __str__(self):
        if self.uses_memory:
            push = self.push or EPSILON_CHAR
            return (
                f"<{self.source}, {_symbol_label(self.read)}, "
                f"{_symbol_label(self.pop)}/{push}, {self.target}>"
            )
        return f"<{self.source}, {_symbol_label(self.read)}, {self.target}>"


class TransitionTable:
    """Ordered, immutable collection of transitions.

    Declaration order matters: when several rules apply to a configuration
    the first declared one wins. Rules are indexed by source state, and each
    bucket keeps declaration order, so `from_state` gives the candidates for
    a state in the same order a scan from the top of the table would.
    """

    def __init__(self, transitions: Iterable[Transition]):
        self._transitions: Tuple[Transition, ...] = tuple(
            t if isinstance(t, Transition) else Transition.from_fields(t)
            for t in transitions
        )
        if not self._transitions:
            raise MalformedAutomatonError("A transition table needs at least one transition")

        by_source: Dict[Any, List[Transition]] = defaultdict(list)
        for transition in self._transitions:
            by_source[transition.source].append(transition)
        self._by_source = {src: tuple(rules) for src, rules in by_source.items()}

    def __len__(self) -> int:
        return len(self._transitions)

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._transitions)

    def __getitem__(self, index: int) -> Transition:
        return self._transitions[index]

    def __eq__(self, other):
        if not isinstance(other, TransitionTable):
            return NotImplemented
        return self._transitions == other._transitions

    def __hash__(self):
        return hash(self._transitions)

    def __repr__(self):
        return f"TransitionTable({list(self._transitions)!r})"

    def from_state(self, state: Any) -> Tuple[Transition, ...]:
        return self._by_source.get(state, ())

    def states(self) -> set:
        found = set()
        for transition in self._transitions:
            found.add(transition.source)
            found.add(transition.target)
        return found

    def has_memory_operations(self) -> bool:
        return any(t.uses_memory for t in self._transitions)
