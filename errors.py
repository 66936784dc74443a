class AutomatonError(Exception):
    pass


class MalformedAutomatonError(AutomatonError, ValueError):
    """Raised when a transition, a definition line or a whole automaton
    does not describe a legal automaton (unknown states, wrong arity, ...)."""


class StackInvariantError(AutomatonError, AssertionError):
    """The memory stack was observed empty. This is an engine defect, the
    bottom marker can never be removed by a legal move."""


class TranslationUnavailableError(AutomatonError, TypeError):
    pass
