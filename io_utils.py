import os
import re
from dataclasses import replace
from typing_extensions import *

from automaton import Automaton
from errors import AutomatonError

AUTOMATON_KEYWORDS = ["type:", "states:", "alphabet:", "start:", "accept:", "translate:"]


def detect_automaton(content: str) -> bool:
    lines = [
        line.strip()
        for line in content.strip().split("\n")
        if line.strip() and not line.strip().startswith("#")
    ]

    if any(
        any(line.lower().startswith(keyword) for keyword in AUTOMATON_KEYWORDS)
        for line in lines
    ):
        return True

    # Without keywords, every line has to be a 3- or 5-field transition
    return bool(lines) and all(
        "->" in line or len(line.split()) in (3, 5) for line in lines
    )


def load_from_string(
    content: str, base_name: str = "automaton", strict: bool = False
) -> Dict[str, Automaton]:
    """Load the automata described in `content`.

    Content is either a list of named sections::

        ends_with_01:
        states: q0 q1 q2
        ...

        parens:
        type: pda
        ...

    or unnamed blocks separated by `---`, named after `base_name`
    (`base_name`, `base_name1`, ...). A section that fails to load is
    reported and skipped, unless `strict` is set.
    """
    automata: Dict[str, Automaton] = {}

    name_pattern = re.compile(r"^([A-Za-z]\w*):\s*$", re.MULTILINE)

    if name_pattern.search(content):
        # Named sections: NAME:\n...definition...
        sections = name_pattern.split(content)

        for i in range(1, len(sections), 2):
            if i + 1 >= len(sections):
                continue

            name = sections[i].strip()
            definition = sections[i + 1].strip()

            if not definition:
                continue

            if not detect_automaton(definition):
                if strict:
                    raise AutomatonError(f"Section '{name}' is not an automaton definition")
                print(f"Warning: Skipping section '{name}': not an automaton definition")
                continue

            try:
                loaded = Automaton.from_string(definition)
                if loaded:
                    automata[name] = _renamed(loaded[0], name)
            except AutomatonError as e:
                if strict:
                    raise
                print(f"Warning: Failed to load automaton '{name}': {e}")
    else:
        try:
            loaded = Automaton.from_string(content)
        except AutomatonError as e:
            if strict:
                raise
            print(f"Warning: Failed to load automaton: {e}")
            loaded = []

        for idx, aut in enumerate(loaded):
            key = f"{base_name}{idx if idx > 0 else ''}"
            automata[key] = _renamed(aut, key)

    return automata


def load_from_file(filename: str, strict: bool = False) -> Dict[str, Automaton]:
    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    base_name = os.path.basename(filename).rsplit(".", 1)[0]
    return load_from_string(content, base_name=base_name, strict=strict)


def _renamed(automaton: Automaton, name: str) -> Automaton:
    # Keep an explicit `name:` line, otherwise use the section/file name
    if automaton.name != "automaton":
        return automaton
    return replace(automaton, name=name)
