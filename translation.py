import logging
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from transitions import is_epsilon

logger = logging.getLogger(__name__)


class TranslationTable:
    """Maps single input symbols to output fragments.

    Entries keep the order they were given in and keys may repeat. A symbol
    resolves to the first entry with that key; later entries for the same
    key are never used. The symbol produces no output when that fragment is
    epsilon or, if an output alphabet was declared, is not part of it.
    """

    def __init__(
        self,
        entries: Union[Mapping[str, str], Iterable[Tuple[str, str]]],
        output_alphabet: Optional[Iterable[str]] = None,
    ):
        if isinstance(entries, Mapping):
            entries = entries.items()
        self._entries: Tuple[Tuple[str, Optional[str]], ...] = tuple(
            (key, None if is_epsilon(value) else value) for key, value in entries
        )
        self.output_alphabet = (
            frozenset(output_alphabet) if output_alphabet is not None else None
        )

        self._first: Dict[str, Optional[str]] = {}
        for key, value in self._entries:
            if len(key) != 1:
                logger.warning(
                    "Translation key '%s' is longer than one symbol and will never match", key
                )
                continue
            self._first.setdefault(key, value)

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, Optional[str]]]:
        return iter(self._entries)

    def __eq__(self, other):
        if not isinstance(other, TranslationTable):
            return NotImplemented
        return (self._entries == other._entries
                and self.output_alphabet == other.output_alphabet)

    def __hash__(self):
        return hash((self._entries, self.output_alphabet))

    def __repr__(self):
        return f"TranslationTable({list(self._entries)!r})"

    def lookup(self, symbol: str) -> Optional[str]:
        """Fragment emitted for `symbol`, or None if it emits nothing."""
        fragment = self._first.get(symbol)
        if fragment is None:
            return None
        if self.output_alphabet is not None and fragment not in self.output_alphabet:
            return None
        return fragment

    def translate(self, text: str) -> str:
        output = []
        for symbol in text:
            fragment = self.lookup(symbol)
            if fragment is not None:
                output.append(fragment)
        return "".join(output)


def translate(table: TranslationTable, text: str) -> str:
    return table.translate(text)
