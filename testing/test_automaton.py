import dataclasses

import pytest
from graphviz import Digraph

import automaton
from automaton import Automaton, Kind
from engine import FINAL_STATE_AND_EMPTY_STACK
from errors import MalformedAutomatonError, TranslationUnavailableError
from translation import TranslationTable


@pytest.fixture
def fsa():
    return Automaton(
        kind=Kind.FSA,
        states={"q0", "q1", "q2"},
        alphabet={"0", "1"},
        transitions=[
            ("q0", "0", "q1"),
            ("q0", "1", "q0"),
            ("q1", "1", "q2"),
            ("q1", "0", "q1"),
            ("q2", "0", "q1"),
            ("q2", "1", "q0"),
        ],
        start_state="q0",
        accepting_states={"q2"},
        name="ends_with_01",
    )


@pytest.fixture
def pda():
    return Automaton(
        kind=Kind.PDA,
        states={"q0"},
        alphabet={"(", ")"},
        transitions=[
            ("q0", "(", "&", "(", "q0"),
            ("q0", ")", "(", "&", "q0"),
        ],
        start_state="q0",
        accepting_states={"q0"},
        acceptance_mode=FINAL_STATE_AND_EMPTY_STACK,
    )


@pytest.fixture
def fsa_t():
    return Automaton(
        kind=Kind.FSA_T,
        states={"s"},
        alphabet={"a", "b"},
        transitions=[("s", "a", "s")],
        start_state="s",
        accepting_states={"s"},
        output_alphabet={"1", "2"},
        translation_table={"a": "1", "b": "2"},
    )


@pytest.fixture
def anbn_block():
    return """
    type: pda-t
    alphabet: a b
    states: q0 q1 q2
    start: q0
    accept: q2
    output: 0 1
    translate: a-0 b-1
    # push one A per a
    q0 a & A q0
    q0 b A & q1
    q1 b A & q1
    q1 & Z Z q2
    q0 & Z Z q2
    """


def test_kind():
    assert Kind.of(memory=True, translation=False) is Kind.PDA
    assert Kind.PDA_T.memory and Kind.PDA_T.translation
    assert not Kind.FSA.memory and not Kind.FSA.translation
    assert Kind.FSA_T.label == "FSA-T"
    assert Kind.parse("pushdown") is Kind.PDA
    assert Kind.parse("2") is Kind.FSA_T

    with pytest.raises(MalformedAutomatonError):
        Kind.parse("turing")


def test_run_fsa(fsa):
    assert fsa.run("1101")
    assert not fsa.run("110")
    assert not fsa.run()
    assert automaton.run(fsa, "01")
    assert not fsa.run("01&")
    assert fsa.simulate("01", max_steps=2).terminated


def test_run_is_idempotent(fsa):
    assert [fsa.run("1001") for _ in range(3)] == [True, True, True]
    assert [fsa.run("10") for _ in range(3)] == [False, False, False]


def test_run_pda(pda):
    assert pda.run("(())")
    assert not pda.run("(()")
    assert pda.run("")
    assert pda.run("(()", acceptance_mode="final_state")


def test_simulate(fsa):
    result = fsa.simulate("01")
    assert result.accepted
    assert result.configuration.state == "q2"
    assert len(result.path) == 2


def test_max_steps():
    looping = Automaton(
        states={"q0", "q1"},
        transitions=[("q0", "&", "q0"), ("q0", "a", "q1")],
        start_state="q0",
        accepting_states={"q1"},
    )
    assert not looping.run("a", max_steps=10)
    assert not looping.simulate("a", max_steps=10).terminated


def test_translate(fsa_t):
    assert fsa_t.translate("aba") == "121"
    assert automaton.translate(fsa_t, "") == ""
    assert isinstance(fsa_t.translation_table, TranslationTable)
    assert fsa_t.translation_table.output_alphabet == frozenset({"1", "2"})


def test_translate_independent_of_verdict(fsa_t):
    # no transition reads 'b', yet the word still translates
    assert not fsa_t.run("ab")
    assert fsa_t.translate("ab") == "12"


def test_translate_unavailable(fsa, pda):
    with pytest.raises(TranslationUnavailableError):
        fsa.translate("01")
    with pytest.raises(TypeError):
        pda.translate("()")


def test_frozen(fsa):
    with pytest.raises(dataclasses.FrozenInstanceError):
        fsa.start_state = "q1"
    assert isinstance(fsa.states, frozenset)


def test_invalid_states():
    with pytest.raises(MalformedAutomatonError) as excinfo:
        Automaton(
            states={"q0", "q1"},
            transitions=[("q0", "a", "q1"), ("q1", "a", "q7")],
            start_state="q5",
            accepting_states={"q9"},
        )

    message = str(excinfo.value)
    assert "start state 'q5'" in message
    assert "accepting state 'q9'" in message
    assert "unknown state 'q7'" in message


def test_malformed_is_value_error():
    with pytest.raises(ValueError):
        Automaton(states={"q0"}, transitions=[("q0", "a", "q0")], start_state="q1")


def test_missing_transitions():
    with pytest.raises(MalformedAutomatonError):
        Automaton(states={"q0"}, start_state="q0")


def test_fsa_cannot_use_stack():
    with pytest.raises(MalformedAutomatonError):
        Automaton(
            kind=Kind.FSA,
            states={"q0"},
            transitions=[("q0", "a", "&", "A", "q0")],
            start_state="q0",
        )


def test_translation_capability_checked():
    with pytest.raises(MalformedAutomatonError):
        Automaton(kind=Kind.FSA_T, states={"q0"},
                  transitions=[("q0", "a", "q0")], start_state="q0")

    with pytest.raises(MalformedAutomatonError):
        Automaton(kind=Kind.FSA, states={"q0"},
                  transitions=[("q0", "a", "q0")], start_state="q0",
                  translation_table={"a": "b"})


def test_translation_keys_checked_against_alphabet():
    with pytest.raises(MalformedAutomatonError) as excinfo:
        Automaton(kind=Kind.FSA_T, states={"s"}, alphabet={"a"},
                  transitions=[("s", "a", "s")], start_state="s",
                  translation_table={"a": "1", "c": "3"})
    assert "translation key 'c'" in str(excinfo.value)

    # without a declared alphabet any key is allowed
    aut = Automaton(kind=Kind.FSA_T, states={"s"}, transitions=[("s", "a", "s")],
                    start_state="s", translation_table={"a": "1", "c": "3"})
    assert aut.translate("ca") == "31"


def test_acceptance_mode_checked():
    with pytest.raises(MalformedAutomatonError):
        Automaton(states={"q0"}, transitions=[("q0", "a", "q0")],
                  start_state="q0", acceptance_mode="empty_stack")

    with pytest.raises(MalformedAutomatonError):
        Automaton(kind=Kind.PDA, states={"q0"}, transitions=[("q0", "a", "q0")],
                  start_state="q0", acceptance_mode="whenever")


def test_acceptance_override_on_fsa(fsa):
    with pytest.raises(ValueError):
        fsa.run("01", acceptance_mode="empty_stack")


def test_bottom_marker_checked():
    with pytest.raises(MalformedAutomatonError):
        Automaton(kind=Kind.PDA, states={"q0"}, transitions=[("q0", "a", "q0")],
                  start_state="q0", bottom_marker="Z0")


def test_kind_from_string():
    aut = Automaton(kind="pda", states={"q0"}, transitions=[("q0", "a", "q0")],
                    start_state="q0")
    assert aut.kind is Kind.PDA


def test_parse_block(anbn_block):
    aut = Automaton._parse_block(anbn_block)
    assert aut.kind is Kind.PDA_T
    assert aut.states == {"q0", "q1", "q2"}
    assert len(aut.transitions) == 5
    assert aut.output_alphabet == {"0", "1"}

    for word in ["", "ab", "aabb", "aaabbb"]:
        assert aut.run(word)
    for word in ["a", "b", "aab", "abb", "ba"]:
        assert not aut.run(word)

    assert aut.translate("aabb") == "0011"


def test_parse_arrow_notation():
    [fa, pda] = Automaton.from_string("""
    start: q0
    accept: q1
    q0 -> a -> q1
    q1 -> eps -> q0
    ---
    start: p
    accept: r
    p, a, & -> p, A
    p, &, A -> r, &
    """)

    assert fa.kind is Kind.FSA
    assert fa.states == {"q0", "q1"}
    assert fa.transitions[1].read is None

    assert pda.kind is Kind.PDA
    assert pda.transitions[0].push == "A"
    assert pda.run("a")


def test_parse_infers_translation_kind():
    [aut] = Automaton.from_string("""
    start: s
    accept: s
    translate: a-x b-&
    s a s
    s b s
    """)
    assert aut.kind is Kind.FSA_T
    assert aut.output_alphabet is None
    assert aut.translate("abba") == "xx"


def test_parse_declared_states_are_strict():
    with pytest.raises(MalformedAutomatonError):
        Automaton.from_string("""
        states: q0
        start: q0
        accept: q0
        q0 a q1
        """)


def test_parse_errors():
    with pytest.raises(MalformedAutomatonError):
        Automaton.from_string("start: q0\nq0 a\n")

    with pytest.raises(MalformedAutomatonError):
        Automaton.from_string("start: q0\ntranslate: ab\nq0 a q0\n")

    with pytest.raises(MalformedAutomatonError):
        Automaton.from_string("type: turing\nstart: q0\nq0 a q0\n")


def test_load_from_file(tmp_path, anbn_block):
    path = tmp_path / "anbn.txt"
    path.write_text(anbn_block + "\n---\n" + anbn_block, encoding="utf-8")
    loaded = Automaton.load_from_file(str(path))
    assert len(loaded) == 2
    assert loaded[0] == loaded[1]


def test_get_stats(pda):
    stats = pda.get_stats()
    assert stats["kind"] == "PDA"
    assert stats["states"] == 1
    assert stats["transitions"] == 2
    assert stats["epsilon_transitions"] == 0
    assert stats["translations"] == 0


def test_to_graphviz(pda, fsa):
    dot = pda.to_graphviz()
    assert isinstance(dot, Digraph)
    assert "(, ε → (" in dot.source
    assert "doublecircle" in dot.source

    dot = fsa.to_graphviz()
    assert "label=q2" in dot.source or 'label="q2"' in dot.source
