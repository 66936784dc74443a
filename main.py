import argparse
import logging
import sys

import cli
from engine import ACCEPTANCE_MODES
from errors import AutomatonError
from io_utils import load_from_file


def build_arg_parser():
    p = argparse.ArgumentParser(
        description="Run deterministic finite-state and pushdown automata (and translators)."
    )
    p.add_argument("input", nargs="?", help="Definition file with one or more automata")
    p.add_argument("-n", "--name", help="Automaton to use when the file defines several")
    p.add_argument("-w", "--word", default="", help="Input word (default: the empty word)")
    p.add_argument("-t", "--translate", nargs="?", const=True, default=None, metavar="TEXT",
                   help="Also translate TEXT (default: the input word)")
    p.add_argument("--max-steps", type=int, help="Stop runs after this many moves")
    p.add_argument("--acceptance", choices=ACCEPTANCE_MODES,
                   help="Override the acceptance mode of a pushdown automaton")
    p.add_argument("--trace", action="store_true", help="Print every move of the run")
    p.add_argument("--graph", metavar="OUT", help="Render the automaton to OUT.png")
    p.add_argument("-v", "--verbose", action="store_true", help="Log the engine's debug trace")
    p.add_argument("-i", "--interactive", action="store_true", help="Start the interactive terminal")
    return p


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.interactive or not args.input:
        cli.main()
        return 0

    if args.max_steps is not None and args.max_steps <= 0:
        print("Error: --max-steps must be positive")
        return 2

    try:
        automata = load_from_file(args.input, strict=True)
    except (AutomatonError, OSError) as e:
        print(f"Error: {e}")
        return 1

    if not automata:
        print(f"Error: no automaton found in {args.input}")
        return 1

    if args.name:
        if args.name not in automata:
            print(f"Automaton not found: {args.name} (available: {', '.join(automata)})")
            return 1
        name = args.name
    elif len(automata) == 1:
        name = next(iter(automata))
    else:
        print(f"Several automata defined, choose one with --name: {', '.join(automata)}")
        return 1

    aut = automata[name]
    print(f"[{aut.kind.label}] {name}")
    print(f"- Input: {args.word}")

    try:
        result = aut.simulate(args.word, max_steps=args.max_steps,
                              acceptance_mode=args.acceptance)
        if args.trace:
            for line in cli.format_trace(result):
                print(line)
        print(f"- Verdict: {cli.format_verdict(result)}")

        if args.translate is not None:
            text = args.word if args.translate is True else args.translate
            print(f"- Output: {aut.translate(text)}")

        if args.graph:
            aut.to_graphviz(filename=args.graph, view=False)
            print(f"Created: {args.graph}.png")
    except (AutomatonError, ValueError, RuntimeError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nProgram interrupted by user")
        sys.exit(0)
