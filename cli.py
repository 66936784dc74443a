from typing_extensions import *

from automaton import Automaton
from engine import RunResult
from errors import AutomatonError
from io_utils import load_from_file

HELP = """
Commands:
  LOADING:
    load <file>                  - Load automata from file
    list                         - List all loaded automata

  AUTOMATA OPERATIONS:
    show <name>                  - Show automaton info
    graph <name>                 - Visualize automaton
    run <name> [word]            - Test if word is accepted
    trace <name> [word]          - Show every move of the run
    translate <name> [text]      - Translate text (FSA-T / PDA-T only)
    limit [steps|off]            - Show or set the step ceiling for runs

  GENERAL:
    delete <name>                - Delete automaton
    clear                        - Clear all
    exit                         - Exit
"""


def format_verdict(result: RunResult) -> str:
    if not result.terminated:
        return f"DID NOT TERMINATE within {result.steps} steps"
    return "ACCEPTED" if result.accepted else "REJECTED"


def format_trace(result: RunResult) -> List[str]:
    lines = [f"  {i + 1:>3}. {transition}" for i, transition in enumerate(result.path)]
    lines.append(f"  final configuration: {result.configuration}")
    return lines


def main():
    """Simple interactive terminal for automaton operations."""
    automata: Dict[str, Automaton] = {}
    max_steps: Optional[int] = None

    print("Automaton Terminal - Type 'help' for commands\n")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()
            # A missing word means the empty word
            word = parts[2] if len(parts) > 2 else ""

            # Exit
            if cmd in ["exit", "quit"]:
                break

            # Help
            elif cmd == "help":
                print(HELP)

            # Load
            elif cmd == "load":
                if len(parts) < 2:
                    print("Usage: load <filename>")
                    continue
                try:
                    loaded = load_from_file(parts[1])
                    automata.update(loaded)
                    if loaded:
                        print(f"Loaded {len(loaded)} automata: {', '.join(loaded.keys())}")
                    else:
                        print("No items loaded")
                except (AutomatonError, OSError) as e:
                    print(f"Error: {e}")

            # List
            elif cmd == "list":
                if automata:
                    print("Automata:")
                    for name, aut in sorted(automata.items()):
                        print(f"  {name}: {aut.kind.label}, {len(aut.states)} states")
                else:
                    print("Nothing loaded")

            # Step ceiling
            elif cmd == "limit":
                if len(parts) > 1:
                    if parts[1].lower() == "off":
                        max_steps = None
                    elif parts[1].isdigit() and int(parts[1]) > 0:
                        max_steps = int(parts[1])
                    else:
                        print("Usage: limit [steps|off]")
                        continue
                print(f"Step ceiling: {max_steps if max_steps is not None else 'off'}")

            # Delete item
            elif cmd == "delete":
                if len(parts) < 2:
                    print("Usage: delete <name>")
                elif parts[1] in automata:
                    del automata[parts[1]]
                    print(f"Deleted: {parts[1]}")
                else:
                    print(f"Not found: {parts[1]}")

            # Clear all
            elif cmd == "clear":
                automata.clear()
                print("Cleared all")

            elif cmd in ["show", "graph", "run", "trace", "translate"]:
                if len(parts) < 2:
                    print(f"Usage: {cmd} <name>" + ("" if cmd in ["show", "graph"] else " [word]"))
                    continue
                if parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                    continue
                aut = automata[parts[1]]

                try:
                    # Show automaton info
                    if cmd == "show":
                        print(f"\n{parts[1]}:")
                        print(f"  Kind: {aut.kind.label}")
                        print(f"  States: {len(aut.states)}")
                        print(f"  Start: {aut.start_state}")
                        print(f"  Accepting: {sorted(aut.accepting_states, key=str)}")
                        print(f"  Transitions: {len(aut.transitions)}")
                        for transition in aut.transitions:
                            print(f"    {transition}")
                        if aut.kind.memory:
                            print(f"  Bottom marker: {aut.bottom_marker}")
                            print(f"  Acceptance: {aut.acceptance_mode}")
                        if aut.kind.translation:
                            entries = ", ".join(
                                f"{key}-{value or '&'}" for key, value in aut.translation_table
                            )
                            print(f"  Translation: {entries}")
                        print()

                    # Graph automaton
                    elif cmd == "graph":
                        aut.to_graphviz(filename=parts[1], view=True)
                        print(f"Created: {parts[1]}.png")

                    # Test word on automaton
                    elif cmd == "run":
                        print(format_verdict(aut.simulate(word, max_steps=max_steps)))

                    # Show the moves of a run
                    elif cmd == "trace":
                        result = aut.simulate(word, max_steps=max_steps)
                        for line in format_trace(result):
                            print(line)
                        print(format_verdict(result))

                    # Translate text
                    elif cmd == "translate":
                        print(f"Output: {aut.translate(word)}")

                except (AutomatonError, OSError, RuntimeError) as e:
                    print(f"Error: {e}")

            else:
                print(f"Unknown command: {cmd}")

        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break

    print("Goodbye!")


if __name__ == "__main__":
    main()
