from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing_extensions import *

from graphviz import Digraph

from configuration import DEFAULT_BOTTOM_MARKER
from engine import ACCEPTANCE_MODES, FINAL_STATE, RunResult, traverse
from errors import MalformedAutomatonError, TranslationUnavailableError
from transitions import Transition, TransitionTable
from translation import TranslationTable


class Kind(Enum):
    """Which capabilities an automaton has: (memory, translation)."""

    FSA = (False, False)
    FSA_T = (False, True)
    PDA = (True, False)
    PDA_T = (True, True)

    @property
    def memory(self) -> bool:
        return self.value[0]

    @property
    def translation(self) -> bool:
        return self.value[1]

    @property
    def label(self) -> str:
        return self.name.replace("_", "-")

    @classmethod
    def of(cls, memory: bool, translation: bool) -> "Kind":
        return cls((bool(memory), bool(translation)))

    @classmethod
    def parse(cls, text: str) -> "Kind":
        # Support readable type names
        type_map = {
            "1": cls.FSA,
            "fsa": cls.FSA,
            "dfa": cls.FSA,
            "dea": cls.FSA,
            "2": cls.FSA_T,
            "fsa-t": cls.FSA_T,
            "fsat": cls.FSA_T,
            "translator": cls.FSA_T,
            "3": cls.PDA,
            "pda": cls.PDA,
            "pushdown": cls.PDA,
            "4": cls.PDA_T,
            "pda-t": cls.PDA_T,
            "pdat": cls.PDA_T,
        }
        try:
            return type_map[text.strip().lower()]
        except KeyError:
            raise MalformedAutomatonError(
                f"Invalid automaton type: {text}. Must be one of fsa, fsa-t, pda, pda-t."
            ) from None


@dataclass(frozen=True)
class Automaton:
    """
    Deterministic automaton with optional stack memory and optional
    translation.

    kind:
        Kind.FSA   = finite-state recognizer
        Kind.FSA_T = finite-state translator
        Kind.PDA   = pushdown recognizer
        Kind.PDA_T = pushdown translator

    The descriptor is frozen. Every run builds its own configuration, so
    the same automaton can be run any number of times (or from several
    threads) without interference.
    """

    kind: Kind = Kind.FSA
    states: frozenset = field(default_factory=frozenset)
    alphabet: frozenset = field(default_factory=frozenset)
    transitions: TransitionTable = None
    start_state: Any = None
    accepting_states: frozenset = field(default_factory=frozenset)

    # Translators only
    output_alphabet: Optional[frozenset] = None
    translation_table: Optional[TranslationTable] = None

    # Pushdown automata only
    bottom_marker: str = DEFAULT_BOTTOM_MARKER
    acceptance_mode: str = FINAL_STATE

    name: str = "automaton"

    # -------------------------------------------------------------------------
    # Construction / loading
    # -------------------------------------------------------------------------

    @staticmethod
    def load_from_file(file_path: str) -> List["Automaton"]:
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
        return Automaton.from_string(content)

    @staticmethod
    def from_string(content: str) -> List["Automaton"]:
        automata = []
        for block in content.split("---"):
            block = block.strip()
            if not block:
                continue
            automata.append(Automaton._parse_block(block))
        return automata

    @staticmethod
    def _parse_block(block: str) -> "Automaton":
        states = set()
        alphabet = set()
        output_alphabet = None
        start_state = None
        accepting_states = set()
        transitions = []
        translations = []
        automaton_kind = None
        bottom_marker = DEFAULT_BOTTOM_MARKER
        acceptance_mode = FINAL_STATE
        name = "automaton"
        states_declared = False

        for line in block.strip().split("\n"):
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            key, sep, value = line.partition(":")
            key = key.strip().lower()
            value = value.strip()

            if sep and key == "type":
                automaton_kind = Kind.parse(value)
            elif sep and key == "name":
                name = value
            elif sep and key == "alphabet":
                alphabet.update(value.split())
            elif sep and key in ("output", "output_alphabet"):
                output_alphabet = set(value.split())
            elif sep and key == "states":
                states.update(value.split())
                states_declared = True
            elif sep and key == "start":
                start_state = value
            elif sep and key in ("accept", "final"):
                accepting_states.update(value.split())
            elif sep and key in ("bottom", "start_stack"):
                bottom_marker = value
            elif sep and key == "acceptance":
                acceptance_mode = value.lower()
            elif sep and key in ("translate", "translation", "beta"):
                # Format: a-1 b-2 c-&
                for pair in value.split():
                    word, dash, fragment = pair.partition("-")
                    if not dash or not word:
                        raise MalformedAutomatonError(
                            f"Translation entries look like 'symbol-fragment', got '{pair}'"
                        )
                    translations.append((word, fragment))

            elif "->" in line:
                parts = [p.strip() for p in line.split("->")]
                if len(parts) == 3:
                    # FSA arrow notation: q0 -> a -> q1
                    transitions.append(Transition.from_fields(parts))
                elif len(parts) == 2:
                    # PDA arrow notation: q0, a, X -> q1, YZ
                    left = [p.strip() for p in parts[0].split(",")]
                    right = [p.strip() for p in parts[1].split(",")]
                    if len(left) != 3 or len(right) != 2:
                        raise MalformedAutomatonError(f"Cannot parse transition: {line}")
                    src, input_sym, stack_sym = left
                    tgt, stack_string = right
                    transitions.append(
                        Transition(src, input_sym, tgt, pop=stack_sym, push=stack_string)
                    )
                else:
                    raise MalformedAutomatonError(f"Cannot parse transition: {line}")

            else:
                # Plain notation: q0 a q1  or  q0 a X YZ q1
                transitions.append(Transition.from_fields(line.split()))

        table = TransitionTable(transitions)

        if not states_declared:
            states |= table.states() | accepting_states
            if start_state is not None:
                states.add(start_state)

        if automaton_kind is None:
            automaton_kind = Kind.of(table.has_memory_operations(), bool(translations))

        return Automaton(
            kind=automaton_kind,
            states=frozenset(states),
            alphabet=frozenset(alphabet),
            transitions=table,
            start_state=start_state,
            accepting_states=frozenset(accepting_states),
            output_alphabet=output_alphabet,
            translation_table=TranslationTable(translations) if translations else None,
            bottom_marker=bottom_marker,
            acceptance_mode=acceptance_mode,
            name=name,
        )

    def __post_init__(self):
        """Normalize the fields and validate the automaton structure."""
        kind = self.kind
        if isinstance(kind, str):
            kind = Kind.parse(kind)
        object.__setattr__(self, "kind", kind)

        for attr in ("states", "alphabet", "accepting_states"):
            object.__setattr__(self, attr, frozenset(getattr(self, attr)))

        if self.transitions is None:
            raise MalformedAutomatonError(f"Automaton '{self.name}' has no transitions")
        if not isinstance(self.transitions, TransitionTable):
            object.__setattr__(self, "transitions", TransitionTable(self.transitions))

        self._normalize_translation()
        self._validate()

    def _normalize_translation(self):
        table = self.translation_table
        output_alphabet = self.output_alphabet
        if output_alphabet is not None:
            output_alphabet = frozenset(output_alphabet)
        elif isinstance(table, TranslationTable):
            output_alphabet = table.output_alphabet

        if table is not None and (
            not isinstance(table, TranslationTable)
            or table.output_alphabet != output_alphabet
        ):
            table = TranslationTable(
                table if not isinstance(table, TranslationTable) else list(table),
                output_alphabet,
            )

        object.__setattr__(self, "output_alphabet", output_alphabet)
        object.__setattr__(self, "translation_table", table)

    def _validate(self):
        problems = []

        if self.start_state not in self.states:
            problems.append(f"start state {self.start_state!r} is not a state")

        for state in sorted(self.accepting_states - self.states, key=str):
            problems.append(f"accepting state {state!r} is not a state")

        for transition in self.transitions:
            for state in (transition.source, transition.target):
                if state not in self.states:
                    problems.append(f"transition {transition} uses unknown state {state!r}")

        if not self.kind.memory and self.transitions.has_memory_operations():
            problems.append(f"{self.kind.label} transitions cannot pop or push stack symbols")

        if self.kind.translation and self.translation_table is None:
            problems.append(f"{self.kind.label} requires a translation table")
        if not self.kind.translation and self.translation_table is not None:
            problems.append(f"{self.kind.label} cannot carry a translation table")

        # Translation keys come from the input alphabet, when one is declared
        if self.alphabet and self.translation_table is not None:
            for key, _ in self.translation_table:
                if key not in self.alphabet:
                    problems.append(f"translation key {key!r} is not in the alphabet")

        if self.acceptance_mode not in ACCEPTANCE_MODES:
            problems.append(f"unknown acceptance mode {self.acceptance_mode!r}")
        elif self.acceptance_mode != FINAL_STATE and not self.kind.memory:
            problems.append(f"{self.kind.label} can only accept by final state")

        if not isinstance(self.bottom_marker, str) or len(self.bottom_marker) != 1:
            problems.append(
                f"bottom marker must be a single symbol, got {self.bottom_marker!r}"
            )

        if problems:
            raise MalformedAutomatonError(
                f"Invalid automaton '{self.name}':\n  - " + "\n  - ".join(problems)
            )

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def simulate(
        self,
        word: str = "",
        max_steps: Optional[int] = None,
        acceptance_mode: Optional[str] = None,
    ) -> RunResult:
        """Run the automaton on `word` and return the full result (verdict,
        final configuration, applied transitions)."""
        mode = acceptance_mode or self.acceptance_mode
        if mode != FINAL_STATE and not self.kind.memory:
            raise ValueError(f"{self.kind.label} can only accept by final state")

        return traverse(
            self.transitions,
            self.start_state,
            self.accepting_states,
            word,
            bottom_marker=self.bottom_marker if self.kind.memory else None,
            max_steps=max_steps,
            acceptance_mode=mode,
        )

    def run(
        self,
        word: str = "",
        max_steps: Optional[int] = None,
        acceptance_mode: Optional[str] = None,
    ) -> bool:
        """Check if the automaton accepts a word."""
        return self.simulate(word, max_steps, acceptance_mode).accepted

    def translate(self, text: str) -> str:
        if not self.kind.translation:
            raise TranslationUnavailableError(
                f"{self.kind.label} automaton '{self.name}' has no translation table"
            )
        return self.translation_table.translate(text)

    def get_stats(self) -> Dict:
        return {
            "kind": self.kind.label,
            "states": len(self.states),
            "alphabet_size": len(self.alphabet),
            "accepting_states": len(self.accepting_states),
            "transitions": len(self.transitions),
            "epsilon_transitions": sum(1 for t in self.transitions if t.is_epsilon),
            "translations": len(self.translation_table) if self.translation_table else 0,
        }

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def _get_state_id(self, state, state_to_id: dict) -> str:
        """Get or create a clean ID for a state."""
        if state not in state_to_id:
            state_to_id[state] = f"q{len(state_to_id)}"
        return state_to_id[state]

    def to_graphviz(self, filename: Optional[str] = None, view: bool = False) -> Digraph:
        """Generate a Graphviz diagram; rendered to `filename`.png if given."""
        dot = Digraph(
            name=self.kind.label,
            format="png",
            graph_attr={
                "rankdir": "LR",
                "label": f"{self.name} ({self.kind.label})",
                "labelloc": "t",
                "fontname": "Arial",
            },
            node_attr={
                "shape": "circle",
                "fontname": "Arial",
                "style": "filled",
                "fillcolor": "lightblue",
            },
            edge_attr={"fontname": "Arial", "fontsize": "12"},
        )

        state_to_id: Dict[Any, str] = {}

        dot.node("__start__", shape="point", width="0.01", style="invis")

        for state in sorted(self.states, key=str):
            node_id = self._get_state_id(state, state_to_id)
            if state in self.accepting_states:
                dot.node(node_id, label=str(state), shape="doublecircle", fillcolor="lightgreen")
            else:
                dot.node(node_id, label=str(state))

        dot.edge("__start__", self._get_state_id(self.start_state, state_to_id))

        labels = defaultdict(list)
        for transition in self.transitions:
            read = "ε" if transition.read is None else transition.read
            if self.kind.memory:
                pop = "ε" if transition.pop is None else transition.pop
                push = transition.push or "ε"
                label = f"{read}, {pop} → {push}"
            else:
                label = read
            labels[(transition.source, transition.target)].append(label)

        separator = "\n" if self.kind.memory else ", "
        for (src, tgt), edge_labels in labels.items():
            src_id = self._get_state_id(src, state_to_id)
            tgt_id = self._get_state_id(tgt, state_to_id)
            if src == tgt:
                dot.edge(src_id, tgt_id, label=separator.join(edge_labels),
                         headport="n", tailport="n")
            else:
                dot.edge(src_id, tgt_id, label=separator.join(edge_labels))

        if filename is not None:
            dot.render(filename, view=view, cleanup=True)
        return dot


def run(automaton: Automaton, word: str = "", **kwargs) -> bool:
    return automaton.run(word, **kwargs)


def translate(automaton: Automaton, text: str) -> str:
    return automaton.translate(text)
