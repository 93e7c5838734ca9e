import itertools
import unittest

from automaton_studio.automata import (
    DFA,
    NFA,
    AutomatonValidationError,
    EmptyAutomatonError,
    IncompleteAutomatonError,
    InvalidNodeError,
    InvalidTransitionError,
    NoAcceptStatesError,
    create_automaton,
)


def _parity_dfa():
    dfa = DFA(["a", "b"])
    dfa.add_node("x")
    dfa.add_node("y")
    dfa.connect("x", "a", "y")
    dfa.connect("x", "b", "x")
    dfa.connect("y", "a", "x")
    dfa.connect("y", "b", "y")
    dfa.make_accepting("y")
    return dfa


class TestAlphabet(unittest.TestCase):
    def test_valid_alphabets_build(self):
        for alphabet in (["a"], ["a", "b", "c"], ["0", "1"], []):
            self.assertEqual(DFA(alphabet).alphabet, tuple(alphabet))
            self.assertEqual(NFA(alphabet).alphabet, tuple(alphabet))

    def test_duplicates_are_rejected(self):
        for cls in (DFA, NFA):
            with self.assertRaises(AutomatonValidationError):
                cls(["a", "b", "a"])

    def test_null_and_wildcard_are_rejected(self):
        for symbol in ("\0", "?", "", "ab"):
            with self.assertRaises(AutomatonValidationError):
                NFA(["a", symbol])

    def test_empty_move_only_allowed_in_nfa(self):
        with self.assertRaises(AutomatonValidationError):
            DFA(["a", "e"])
        self.assertEqual(NFA(["a", "e"]).alphabet, ("a", "e"))

    def test_factory(self):
        self.assertIsInstance(create_automaton("DFA", ["a"]), DFA)
        self.assertIsInstance(create_automaton("nfa", ["a"]), NFA)
        with self.assertRaises(AutomatonValidationError):
            create_automaton("pda", ["a"])


class TestConstruction(unittest.TestCase):
    def test_first_node_is_initial(self):
        dfa = DFA(["a"])
        dfa.add_node("q")
        dfa.add_node("p", accepting=True)
        self.assertEqual(dfa.initial, "q")
        self.assertTrue(dfa.is_initial("q"))
        self.assertFalse(dfa.is_initial("p"))
        self.assertEqual(dfa.accept_states, frozenset({"p"}))
        self.assertEqual(dfa.nodes, ["p", "q"])

    def test_duplicate_node_is_an_error(self):
        nfa = NFA(["a"])
        nfa.add_node("q")
        with self.assertRaises(InvalidNodeError):
            nfa.add_node("q")
        self.assertEqual(len(nfa), 1)

    def test_illegal_node_names(self):
        nfa = NFA(["a"])
        for name in ("\0", "?", "", "qq", " "):
            with self.assertRaises(InvalidNodeError):
                nfa.add_node(name)
        self.assertEqual(len(nfa), 0)

    def test_make_accepting_unknown_node(self):
        with self.assertRaises(InvalidNodeError):
            DFA(["a"]).make_accepting("z")

    def test_connect_validation(self):
        dfa = DFA(["a"])
        dfa.add_node("x")
        with self.assertRaises(InvalidNodeError):
            dfa.connect("x", "a", "y")
        with self.assertRaises(InvalidNodeError):
            dfa.connect("y", "a", "x")
        with self.assertRaises(InvalidTransitionError):
            dfa.connect("x", "b", "x")
        with self.assertRaises(InvalidTransitionError):
            dfa.connect("x", "e", "x")
        self.assertEqual(dfa.transitions(), {"x": {}})

    def test_dfa_reconnect_overwrites_slot(self):
        dfa = DFA(["a"])
        dfa.add_node("x")
        dfa.add_node("y")
        dfa.connect("x", "a", "x")
        dfa.connect("x", "a", "y")
        self.assertEqual(dfa.transitions()["x"], {"a": frozenset({"y"})})

    def test_nfa_connect_accumulates_targets(self):
        nfa = NFA(["a"])
        nfa.add_node("x")
        nfa.add_node("y")
        nfa.connect("x", "a", "x")
        nfa.connect("x", "a", "y")
        nfa.connect("x", "e", "y")
        self.assertEqual(
            nfa.transitions()["x"], {"a": frozenset({"x", "y"}), "e": frozenset({"y"})}
        )
        with self.assertRaises(InvalidTransitionError):
            nfa.connect("x", "b", "y")


class TestDFAAcceptance(unittest.TestCase):
    def test_scenario_ab_is_accepted(self):
        dfa = _parity_dfa()
        self.assertTrue(dfa.accepts("ab"))
        self.assertEqual(dfa.answer("ab"), "ab is an accepted word")
        self.assertEqual(dfa.answer("aa"), "aa is not an accepted word")

    def test_empty_symbol_is_dropped_from_word(self):
        dfa = _parity_dfa()
        self.assertTrue(dfa.accepts("eaeb"))
        self.assertFalse(dfa.accepts("e"))

    def test_empty_automaton(self):
        with self.assertRaises(EmptyAutomatonError):
            DFA(["a"]).accepts("a")

    def test_incomplete_names_every_missing_slot(self):
        dfa = DFA(["a", "b"])
        dfa.add_node("x")
        dfa.add_node("y")
        dfa.connect("x", "a", "y")
        with self.assertRaises(IncompleteAutomatonError) as ctx:
            dfa.accepts("a")
        self.assertEqual(ctx.exception.missing, (("x", "b"), ("y", "a"), ("y", "b")))
        message = str(ctx.exception)
        self.assertIn("node x for letter b", message)
        self.assertIn("node y for letter a", message)
        self.assertIn("node y for letter b", message)

    def test_no_accepting_nodes_is_a_warning(self):
        dfa = DFA(["a"])
        dfa.add_node("x")
        dfa.connect("x", "a", "x")
        with self.assertRaises(NoAcceptStatesError) as ctx:
            dfa.accepts("a")
        self.assertTrue(str(ctx.exception).startswith("*Warning*"))

    def test_letter_outside_alphabet(self):
        with self.assertRaises(InvalidTransitionError):
            _parity_dfa().accepts("abc")

    def test_accepts_fails_exactly_when_incomplete(self):
        slots = [("x", "a"), ("x", "b"), ("y", "a"), ("y", "b")]
        for count in range(len(slots) + 1):
            for chosen in itertools.combinations(slots, count):
                dfa = DFA(["a", "b"])
                dfa.add_node("x", accepting=True)
                dfa.add_node("y")
                for node, letter in chosen:
                    dfa.connect(node, letter, "y")
                if dfa.is_complete():
                    dfa.accepts("abba")
                else:
                    with self.assertRaises(IncompleteAutomatonError):
                        dfa.accepts("abba")


class TestNFA(unittest.TestCase):
    def _cyclic(self):
        nfa = NFA(["a", "b"])
        for name in "pqr":
            nfa.add_node(name)
        nfa.connect("p", "e", "q")
        nfa.connect("q", "e", "p")
        nfa.connect("q", "e", "r")
        return nfa

    def test_epsilon_closure_terminates_on_cycles_and_is_idempotent(self):
        nfa = self._cyclic()
        closure = nfa.epsilon_closure(["p"])
        self.assertEqual(closure, frozenset("pqr"))
        self.assertEqual(nfa.epsilon_closure(closure), closure)
        self.assertEqual(nfa.epsilon_closure(["r"]), frozenset("r"))

    def test_empty_automaton(self):
        with self.assertRaises(EmptyAutomatonError):
            NFA(["a"]).accepts("a")

    def test_empty_word_is_never_accepted(self):
        nfa = self._cyclic()
        nfa.make_accepting("p")
        nfa.make_accepting("r")
        self.assertFalse(nfa.accepts(""))
        # the initial closure alone does not count for longer words either
        self.assertFalse(nfa.accepts("a"))

    def test_accepting_touch_along_the_way_counts(self):
        nfa = NFA(["a"])
        nfa.add_node("p")
        nfa.add_node("q", accepting=True)
        nfa.connect("p", "a", "q")
        nfa.connect("q", "a", "p")
        # ends in p, which is not accepting, but q was visited after the first letter
        self.assertTrue(nfa.accepts("aa"))
        self.assertTrue(nfa.accepts("a"))

    def test_dead_frontier_rejects(self):
        nfa = NFA(["a", "b"])
        nfa.add_node("p")
        nfa.add_node("q", accepting=True)
        nfa.connect("p", "a", "q")
        self.assertFalse(nfa.accepts("b"))
        self.assertFalse(nfa.accepts("ab"))

    def test_epsilon_moves_after_each_letter(self):
        nfa = NFA(["a", "b"])
        for name in "pqrs":
            nfa.add_node(name)
        nfa.connect("p", "a", "q")
        nfa.connect("q", "e", "r")
        nfa.connect("r", "b", "s")
        nfa.make_accepting("s")
        self.assertTrue(nfa.accepts("ab"))
        self.assertFalse(nfa.accepts("b"))
        self.assertEqual(nfa.move(["p"], "a"), frozenset("q"))


class TestDescribe(unittest.TestCase):
    def test_dfa_node(self):
        dfa = DFA(["a", "b"])
        dfa.add_node("x")
        dfa.add_node("y", accepting=True)
        dfa.connect("x", "a", "y")
        self.assertEqual(dfa.describe_node("x"), "Node x (initial)\n\ta --> y\n\tb --> ?")
        self.assertEqual(dfa.describe_node("y"), "Node y (accepting)\n\ta --> ?\n\tb --> ?")

    def test_whole_automaton_sorted_by_name(self):
        nfa = NFA(["a"])
        nfa.add_node("z")
        nfa.add_node("b")
        nfa.connect("z", "e", "b")
        nfa.connect("z", "a", "b")
        nfa.connect("z", "a", "z")
        self.assertEqual(
            nfa.describe(),
            "Node b\n\t(no transitions)\nNode z (initial)\n\ta --> b, z\n\te --> b",
        )

    def test_no_nodes(self):
        self.assertEqual(DFA(["a"]).describe(), "There are no nodes in this automaton.")

    def test_unknown_node(self):
        with self.assertRaises(InvalidNodeError):
            DFA(["a"]).describe_node("x")


if __name__ == "__main__":
    unittest.main()
