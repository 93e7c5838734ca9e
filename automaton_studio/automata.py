from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Type

EMPTY = "e"
WILDCARD = "?"
NULL = "\0"


class AutomatonError(Exception):
    """Base class for everything the automaton layer refuses to do."""


class AutomatonValidationError(AutomatonError):
    """The alphabet handed to an automaton is malformed."""


class InvalidNodeError(AutomatonError):
    """A node name is illegal, unknown or already taken."""


class InvalidTransitionError(AutomatonError):
    """A transition uses a symbol the automaton cannot read."""


class InvalidAutomatonError(AutomatonError):
    """The automaton cannot be simulated in its current shape."""


class EmptyAutomatonError(InvalidAutomatonError):
    pass


class NoAcceptStatesError(InvalidAutomatonError):
    pass


class IncompleteAutomatonError(InvalidAutomatonError):
    def __init__(self, message: str, missing: Sequence[Tuple[str, str]]) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


TransitionView = Dict[str, Dict[str, FrozenSet[str]]]


def _check_symbol_text(symbol: object, what: str) -> Optional[str]:
    """Return why `symbol` is not a legal one-character name, or None if it is."""
    if not isinstance(symbol, str) or not symbol:
        return f"{what} cannot be empty"
    if len(symbol) != 1:
        return f"{what} must be one character long"
    if symbol == NULL:
        return f"{what} cannot be the null character"
    if symbol == WILDCARD:
        return f"{what} cannot be the '{WILDCARD}' character"
    if not symbol.isprintable() or symbol.isspace():
        return f"{what} must be a printable character"
    return None


class Node:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def targets(self) -> Dict[str, FrozenSet[str]]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Automaton:
    """A finite-state machine built one node and one transition at a time.

    The first node ever added is the initial node and stays so for the
    lifetime of the automaton. Accepting nodes can be marked at any point.
    """

    kind = ""

    __slots__ = ("_alphabet", "_symbol_to_idx", "_nodes", "_initial", "_accept_states")

    def __init__(self, alphabet: Sequence[str]) -> None:
        if alphabet is None:
            raise AutomatonValidationError("The alphabet can't be null.")
        symbols = tuple(alphabet)
        for symbol in symbols:
            problem = _check_symbol_text(symbol, "Alphabet symbols")
            if problem:
                raise AutomatonValidationError(f"{problem}: {symbol!r}.")
        if len(set(symbols)) != len(symbols):
            raise AutomatonValidationError("The alphabet can't contain duplicate characters.")
        self._alphabet = symbols
        self._symbol_to_idx = {symbol: idx for idx, symbol in enumerate(symbols)}
        self._nodes: Dict[str, Node] = {}
        self._initial: Optional[str] = None
        self._accept_states: Set[str] = set()

    # ---------------------------------------------------------------
    @property
    def alphabet(self) -> Tuple[str, ...]:
        return self._alphabet

    @property
    def nodes(self) -> List[str]:
        return sorted(self._nodes)

    @property
    def initial(self) -> Optional[str]:
        return self._initial

    @property
    def accept_states(self) -> FrozenSet[str]:
        return frozenset(self._accept_states)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def is_initial(self, name: str) -> bool:
        self._node(name)
        return name == self._initial

    def is_accepting(self, name: str) -> bool:
        return name in self._accept_states

    # ---------------------------------------------------------------
    def check_new_node(self, name: str) -> None:
        problem = _check_symbol_text(name, "Node names")
        if problem:
            raise InvalidNodeError(f"Invalid node name {name!r}: {problem}.")
        if name in self._nodes:
            raise InvalidNodeError(f"There already is a node named {name}.")

    def add_node(self, name: str, accepting: bool = False) -> None:
        self.check_new_node(name)
        self._nodes[name] = self._create_node(name)
        if self._initial is None:
            self._initial = name
        if accepting:
            self._accept_states.add(name)

    def make_accepting(self, name: str) -> None:
        self._node(name)
        self._accept_states.add(name)

    def check_transition(self, source: str, symbol: str, target: str) -> None:
        self._node(source)
        self._node(target)
        self._check_symbol(symbol)

    def connect(self, source: str, symbol: str, target: str) -> None:
        self.check_transition(source, symbol, target)
        self._link(self._nodes[source], symbol, target)

    def transitions(self) -> TransitionView:
        return {name: node.targets() for name, node in self._nodes.items()}

    # ---------------------------------------------------------------
    def accepts(self, word: str) -> bool:
        raise NotImplementedError

    def answer(self, word: str) -> str:
        verdict = "is" if self.accepts(word) else "is not"
        return f"{word} {verdict} an accepted word"

    def describe_node(self, name: str) -> str:
        node = self._node(name)
        flags = []
        if name == self._initial:
            flags.append("initial")
        if name in self._accept_states:
            flags.append("accepting")
        header = f"Node {name}" + (f" ({', '.join(flags)})" if flags else "")
        lines = [header]
        lines.extend(f"\t{line}" for line in self._describe_targets(node))
        return "\n".join(lines)

    def describe(self) -> str:
        if not self._nodes:
            return "There are no nodes in this automaton."
        return "\n".join(self.describe_node(name) for name in sorted(self._nodes))

    # ---------------------------------------------------------------
    def _node(self, name: str) -> Node:
        node = self._nodes.get(name)
        if node is None:
            raise InvalidNodeError(f"There is no node named {name}.")
        return node

    def _create_node(self, name: str) -> Node:
        raise NotImplementedError

    def _check_symbol(self, symbol: str) -> None:
        raise NotImplementedError

    def _link(self, node: Node, symbol: str, target: str) -> None:
        raise NotImplementedError

    def _describe_targets(self, node: Node) -> List[str]:
        raise NotImplementedError

    def _alphabet_text(self) -> str:
        return "[" + ", ".join(self._alphabet) + "]"


class DFANode(Node):
    __slots__ = ("_slots", "_alphabet")

    def __init__(self, name: str, alphabet: Sequence[str]) -> None:
        super().__init__(name)
        self._alphabet = alphabet
        self._slots: List[Optional[str]] = [None] * len(alphabet)

    def set(self, index: int, target: str) -> None:
        self._slots[index] = target

    def get(self, index: int) -> Optional[str]:
        return self._slots[index]

    def missing(self) -> List[str]:
        return [self._alphabet[idx] for idx, target in enumerate(self._slots) if target is None]

    def targets(self) -> Dict[str, FrozenSet[str]]:
        return {
            symbol: frozenset([target])
            for symbol, target in zip(self._alphabet, self._slots)
            if target is not None
        }


class DFA(Automaton):
    kind = "dfa"

    __slots__ = ()

    def __init__(self, alphabet: Sequence[str]) -> None:
        super().__init__(alphabet)
        if EMPTY in self._symbol_to_idx:
            raise AutomatonValidationError(
                f"The empty move character '{EMPTY}' should not be used in a deterministic automaton."
            )

    def _create_node(self, name: str) -> Node:
        return DFANode(name, self._alphabet)

    def _check_symbol(self, symbol: str) -> None:
        if symbol == EMPTY:
            raise InvalidTransitionError(
                f"The empty move '{EMPTY}' should not be used in a deterministic automaton."
            )
        if symbol not in self._symbol_to_idx:
            raise InvalidTransitionError(
                f"Letter {symbol} is not in the alphabet {self._alphabet_text()}."
            )

    def _link(self, node: Node, symbol: str, target: str) -> None:
        node.set(self._symbol_to_idx[symbol], target)  # type: ignore[attr-defined]

    def missing_transitions(self) -> List[Tuple[str, str]]:
        missing: List[Tuple[str, str]] = []
        for name in sorted(self._nodes):
            node = self._nodes[name]
            missing.extend((name, symbol) for symbol in node.missing())  # type: ignore[attr-defined]
        return missing

    def is_complete(self) -> bool:
        return not self.missing_transitions()

    def accepts(self, word: str) -> bool:
        """Run `word` through the automaton.

        Occurrences of the empty move character are dropped from the word.
        Raises an InvalidAutomatonError subclass when the automaton is empty,
        incomplete or has no accepting node, and InvalidTransitionError when
        the word holds a letter outside the alphabet.
        """
        word = word.replace(EMPTY, "")
        if not self._nodes:
            raise EmptyAutomatonError("This automaton is empty.")
        missing = self.missing_transitions()
        if missing:
            details = "\n".join(
                f"Missing path in node {name} for letter {symbol}" for name, symbol in missing
            )
            raise IncompleteAutomatonError(
                f"{details}\nThis automaton does not represent a finite-state machine.", missing
            )
        if not self._accept_states:
            raise NoAcceptStatesError("*Warning*: No accept-states specified: no word can be accepted.")

        current = self._nodes[self._initial]  # type: ignore[index]
        for letter in word:
            idx = self._symbol_to_idx.get(letter)
            if idx is None:
                raise InvalidTransitionError(
                    f"Letter {letter} is not in the alphabet {self._alphabet_text()}."
                )
            current = self._nodes[current.get(idx)]  # type: ignore[attr-defined,index]
        return current.name in self._accept_states

    def _describe_targets(self, node: Node) -> List[str]:
        return [
            f"{symbol} --> {node.get(idx) or WILDCARD}"  # type: ignore[attr-defined]
            for idx, symbol in enumerate(self._alphabet)
        ]


class NFANode(Node):
    __slots__ = ("_targets",)

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._targets: Dict[str, Set[str]] = {}

    def add(self, symbol: str, target: str) -> None:
        self._targets.setdefault(symbol, set()).add(target)

    def step(self, symbol: str) -> Set[str]:
        return self._targets.get(symbol, set())

    def targets(self) -> Dict[str, FrozenSet[str]]:
        return {symbol: frozenset(targets) for symbol, targets in self._targets.items()}


class NFA(Automaton):
    kind = "nfa"

    __slots__ = ()

    def _create_node(self, name: str) -> Node:
        return NFANode(name)

    def _check_symbol(self, symbol: str) -> None:
        if symbol != EMPTY and symbol not in self._symbol_to_idx:
            raise InvalidTransitionError(
                f"The letter {symbol} does not belong in the alphabet {self._alphabet_text()}."
            )

    def _link(self, node: Node, symbol: str, target: str) -> None:
        node.add(symbol, target)  # type: ignore[attr-defined]

    def epsilon_closure(self, names: Iterable[str]) -> FrozenSet[str]:
        """Every node reachable from `names` through empty moves, `names` included."""
        closure = set(names)
        stack = list(closure)
        while stack:
            here = self._node(stack.pop())
            for nxt in here.step(EMPTY):  # type: ignore[attr-defined]
                if nxt not in closure:
                    closure.add(nxt)
                    stack.append(nxt)
        return frozenset(closure)

    def move(self, names: Iterable[str], symbol: str) -> FrozenSet[str]:
        result: Set[str] = set()
        for name in names:
            result.update(self._node(name).step(symbol))  # type: ignore[attr-defined]
        return frozenset(result)

    def accepts(self, word: str) -> bool:
        """Run `word` through the automaton.

        Unlike the textbook definition, a word is accepted when the
        frontier touches an accepting node after *any* consumed letter, not
        only after the last one. The simulation still rejects as soon as the
        frontier runs empty. No letter is consumed for the empty word, so it
        is never accepted.
        """
        if not self._nodes:
            raise EmptyAutomatonError("This automaton is empty.")
        frontier = self.epsilon_closure([self._initial])  # type: ignore[list-item]
        touched_accepting = False
        for letter in word:
            frontier = self.epsilon_closure(self.move(frontier, letter))
            if not frontier:
                return False
            if frontier & self._accept_states:
                touched_accepting = True
        return touched_accepting

    def _describe_targets(self, node: Node) -> List[str]:
        targets = node.targets()
        if not targets:
            return ["(no transitions)"]
        order = {symbol: idx for idx, symbol in enumerate(self._alphabet)}
        symbols = sorted(targets, key=lambda sym: (order.get(sym, len(order)), sym))
        return [f"{symbol} --> {', '.join(sorted(targets[symbol]))}" for symbol in symbols]


AUTOMATON_TYPES: Mapping[str, Type[Automaton]] = {
    DFA.kind: DFA,
    NFA.kind: NFA,
}


def create_automaton(kind: str, alphabet: Sequence[str]) -> Automaton:
    try:
        factory = AUTOMATON_TYPES[kind.lower()]
    except KeyError as exc:
        raise AutomatonValidationError(f"{kind.upper()} is not a valid automaton type.") from exc
    return factory(alphabet)
