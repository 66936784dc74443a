"""Deterministic traversal of a transition table.

One loop serves both automaton families. The memory dimension is a
capability carried by the configuration: `NoMemory` for finite-state
automata, `MemoryStack` for pushdown automata.

At every step the first applicable rule, in declaration order, is applied
and the search starts over from the new configuration. The run halts when
no rule applies. Nothing guards against epsilon cycles: a table that keeps
preferring an epsilon move (for example an epsilon self-loop declared before
the consuming rules of its state) never halts. Such a table is malformed;
callers that cannot trust their tables pass `max_steps`, and a run that hits
the ceiling comes back with `terminated=False`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Collection, List, Optional

from configuration import Configuration, MemoryStack, NoMemory
from transitions import Transition, TransitionTable

logger = logging.getLogger(__name__)

FINAL_STATE = "final_state"
EMPTY_STACK = "empty_stack"
FINAL_STATE_AND_EMPTY_STACK = "final_state_and_empty_stack"
ACCEPTANCE_MODES = (FINAL_STATE, EMPTY_STACK, FINAL_STATE_AND_EMPTY_STACK)


@dataclass
class RunResult:
    accepted: bool
    terminated: bool
    configuration: Configuration
    path: List[Transition] = field(default_factory=list)

    @property
    def steps(self) -> int:
        return self.configuration.steps

    def __bool__(self):
        return self.accepted


def is_applicable(transition: Transition, configuration: Configuration) -> bool:
    if transition.source != configuration.state:
        return False
    if transition.read is not None and transition.read != configuration.next_symbol():
        return False
    return configuration.memory.permits(transition)


def select_transition(
    table: TransitionTable, configuration: Configuration
) -> Optional[Transition]:
    """First rule of the table, in declaration order, that applies."""
    for transition in table.from_state(configuration.state):
        if is_applicable(transition, configuration):
            return transition
    return None


def apply_transition(transition: Transition, configuration: Configuration) -> None:
    if transition.read is not None:
        configuration.remaining = configuration.remaining[1:]
    configuration.memory.apply(transition)
    configuration.state = transition.target
    configuration.steps += 1


def verdict(
    configuration: Configuration,
    final_states: Collection[Any],
    acceptance_mode: str = FINAL_STATE,
) -> bool:
    if not configuration.input_consumed():
        return False
    if acceptance_mode == FINAL_STATE:
        return configuration.state in final_states
    if acceptance_mode == EMPTY_STACK:
        return configuration.memory.is_empty()
    if acceptance_mode == FINAL_STATE_AND_EMPTY_STACK:
        return configuration.state in final_states and configuration.memory.is_empty()
    raise ValueError(
        f"Invalid acceptance mode: {acceptance_mode}. Must be one of {ACCEPTANCE_MODES}."
    )


def initial_configuration(
    start_state: Any, word: str, bottom_marker: Optional[str] = None
) -> Configuration:
    memory = MemoryStack(bottom_marker) if bottom_marker is not None else NoMemory()
    return Configuration(state=start_state, remaining=word, memory=memory)


def traverse(
    table: TransitionTable,
    start_state: Any,
    final_states: Collection[Any],
    word: str,
    bottom_marker: Optional[str] = None,
    max_steps: Optional[int] = None,
    acceptance_mode: str = FINAL_STATE,
) -> RunResult:
    """Drive the automaton on `word` until no rule applies.

    Parameters
    ----------
    table : TransitionTable
        the transition relation, in declaration order
    start_state : object
        state of the initial configuration
    final_states : collection
        accepting states
    word : string
        input to read
    bottom_marker : string or None
        if given, run with a memory stack initialised to this symbol
        (pushdown automaton). Otherwise run without memory.
    max_steps : int or None
        stop after this many moves and report the run as not terminated,
        unless no rule applies at that point (then it halted normally).
        `None` (the default) means no ceiling.
    acceptance_mode : string
        one of `ACCEPTANCE_MODES`

    Returns
    -------
    RunResult
        verdict, whether the run halted by itself, the final configuration
        and the sequence of applied rules.
    """
    configuration = initial_configuration(start_state, word, bottom_marker)
    path: List[Transition] = []

    while True:
        transition = select_transition(table, configuration)
        if transition is None:
            break

        # only a run that could still move counts as cut off
        if max_steps is not None and configuration.steps >= max_steps:
            logger.warning(
                "Run on '%s' stopped after %d steps without halting, last configuration %s",
                word, configuration.steps, configuration,
            )
            return RunResult(False, False, configuration, path)

        apply_transition(transition, configuration)
        path.append(transition)
        logger.debug("Applied %s -> %s", transition, configuration)

    accepted = verdict(configuration, final_states, acceptance_mode)
    logger.debug(
        "Halted in %s after %d steps: %s",
        configuration, configuration.steps, "accepted" if accepted else "rejected",
    )
    return RunResult(accepted, True, configuration, path)
