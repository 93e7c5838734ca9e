from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Sequence, Tuple

from .automata import AUTOMATON_TYPES, InvalidNodeError, create_automaton
from .errors import TOO_FEW_PARAMETERS, CommandSyntaxError

if TYPE_CHECKING:
    from .interpreter import AutomatonInterpreter

Handler = Callable[["AutomatonInterpreter", str], str]

COMMAND_DELIMITER = ";"
RESERVED_WORDS: Tuple[str, ...] = ("all", "->", "to", ":", "dfa", "nfa")

CONNECT_DELIMITER_RE = re.compile(r"\s+to\s+|\s*->\s*", re.IGNORECASE)
PAIR_RE = re.compile(r"^(.):(.)$")


@dataclass(frozen=True)
class Command:
    name: str
    usage: str
    exportable: bool
    requires_automaton: bool
    handler: Handler = field(repr=False, compare=False)
    takes_path: bool = False

    def run(self, interp: "AutomatonInterpreter", args: str) -> str:
        try:
            return self.handler(interp, args)
        except IndexError as exc:
            raise CommandSyntaxError(TOO_FEW_PARAMETERS) from exc


COMMANDS: Dict[str, Command] = {}


def command(
    name: str,
    usage: str,
    *,
    exportable: bool,
    requires_automaton: bool,
    aliases: Sequence[str] = (),
    takes_path: bool = False,
) -> Callable[[Handler], Handler]:
    def register(handler: Handler) -> Handler:
        entry = Command(name, usage, exportable, requires_automaton, handler, takes_path)
        for keyword in (name, *aliases):
            COMMANDS[keyword] = entry
        return handler

    return register


def command_help_list() -> str:
    lines = ["Type 'help <command>' for how to use each command", "Command list:"]
    lines.extend(f">{name}" for name in sorted(COMMANDS))
    return "\n".join(lines)


def parse_names(args: str) -> List[str]:
    """Turn "A, b ,C" into ['a', 'b', 'c'], rejecting anything but single characters."""
    if not args.strip():
        raise CommandSyntaxError(TOO_FEW_PARAMETERS)
    names: List[str] = []
    for token in args.lower().split(","):
        name = "".join(token.split())
        error = None
        if not name:
            error = "node names cannot be empty"
        elif len(name) > 1:
            error = "node names must be one character long"
        elif name == "\0":
            error = "node name cannot be the null character"
        elif name == "?":
            error = "node name cannot be the '?' character"
        if error is not None:
            raise CommandSyntaxError(f"Invalid node name: {name!r}\n\t{error}")
        names.append(name)
    return names


def _join(names: Sequence[str]) -> str:
    return ", ".join(names)


# ---------------------------------------------------------------
@command(
    "create",
    "create <type> <letter>,<letter>,...\n"
    f"Creates a new automaton of the given type ({', '.join(sorted(AUTOMATON_TYPES))}) "
    "with the alphabet {a,b,c,...}.\n"
    "This needs to be the FIRST command in order to run the other commands.",
    exportable=True,
    requires_automaton=False,
    aliases=("create_new",),
)
def _create(interp: "AutomatonInterpreter", args: str) -> str:
    parts = args.split(None, 1)
    if len(parts) != 2:
        raise CommandSyntaxError("Invalid number of arguments, specify type and alphabet.")
    kind, letters = parts
    if kind.lower() not in AUTOMATON_TYPES:
        raise CommandSyntaxError(f"{kind.upper()} is not a valid automaton type.")
    interp.replace_automaton(create_automaton(kind, parse_names(letters)))
    return "Successfully initialized the automaton"


@command(
    "add",
    "add <node_name>,<node_name>,...\n"
    "Creates new nodes with the selected names and adds them to the automaton.\n"
    "The first node ever added is the initial node.",
    exportable=True,
    requires_automaton=True,
)
def _add(interp: "AutomatonInterpreter", args: str) -> str:
    automaton = interp.automaton
    names = parse_names(args)
    seen = set()
    for name in names:
        automaton.check_new_node(name)
        if name in seen:
            raise CommandSyntaxError(f"Node {name} is listed more than once.")
        seen.add(name)
    for name in names:
        automaton.add_node(name)
    return f"Created node(s) {_join(names)}"


@command(
    "connect",
    "connect <node_name> to <letter>:<target_name>, <letter>:<target_name>, ...\n"
    "connect <node_name> -> <letter>:<target_name>, <letter>:<target_name>, ...\n"
    "Connects the node to each target through the given letter.\n"
    "For example 'connect x to a:y,b:x' means x --(a)--> y and x --(b)--> x.\n"
    "Use the letter 'e' for an empty move in an NFA.",
    exportable=True,
    requires_automaton=True,
)
def _connect(interp: "AutomatonInterpreter", args: str) -> str:
    parts = CONNECT_DELIMITER_RE.split(args, maxsplit=1)
    if len(parts) != 2:
        raise CommandSyntaxError("No 'to' or '->' delimiter found.")
    source = parse_names(parts[0])
    if len(source) != 1:
        raise CommandSyntaxError("Only one node can be connected at a time.")
    transitions: List[Tuple[str, str]] = []
    for raw in parts[1].lower().split(","):
        pair = "".join(raw.split())
        match = PAIR_RE.match(pair)
        if match is None:
            raise CommandSyntaxError(
                f"Argument {pair!r} does not match format <letter>:<target_name>."
            )
        transitions.append((match.group(1), match.group(2)))

    automaton = interp.automaton
    for letter, target in transitions:
        automaton.check_transition(source[0], letter, target)
    for letter, target in transitions:
        automaton.connect(source[0], letter, target)
    return "Nodes successfully connected"


@command(
    "accept",
    "accept <node_name>,<node_name>,...\n"
    "Turns all the provided nodes into accept-states.",
    exportable=True,
    requires_automaton=True,
    aliases=("node_accept",),
)
def _accept(interp: "AutomatonInterpreter", args: str) -> str:
    automaton = interp.automaton
    names = parse_names(args)
    unknown = [name for name in names if name not in automaton]
    if unknown:
        raise InvalidNodeError(f"There is no node named {_join(unknown)}.")
    for name in names:
        automaton.make_accepting(name)
    if len(names) > 1:
        return f"Nodes {_join(names)} are now accept-states."
    return f"Node {names[0]} is now an accept-state."


@command(
    "execute",
    "execute <word>\n"
    "Tells whether or not the word is accepted by the automaton.\n"
    "A DFA accepts a word if the node reached by its last letter is an accept-state.\n"
    "Note: an NFA accepts a word if any accept-state is reached while reading it, "
    "not only after its last letter.",
    exportable=True,
    requires_automaton=True,
)
def _execute(interp: "AutomatonInterpreter", args: str) -> str:
    word = "".join(args.lower().split())
    return interp.automaton.answer(word)


@command(
    "show",
    "show <node_name>,<node_name>,...\n"
    "show all\n"
    "Shows information about each of the provided / all of the nodes.",
    exportable=False,
    requires_automaton=True,
)
def _show(interp: "AutomatonInterpreter", args: str) -> str:
    automaton = interp.automaton
    if args.strip().lower() == "all":
        return automaton.describe()
    return "\n".join(automaton.describe_node(name) for name in parse_names(args))


@command(
    "help",
    "help <command_name>\nDisplays a basic description of the given command.",
    exportable=False,
    requires_automaton=False,
)
def _help(interp: "AutomatonInterpreter", args: str) -> str:
    name = args.strip().lower()
    if not name:
        return command_help_list()
    try:
        return interp.describe(name)
    except CommandSyntaxError:
        return "Invalid command; " + command_help_list()


@command(
    "export",
    "export <file_name>\n"
    "Writes all the successfully executed commands to a file which can be imported later "
    "to rebuild the automaton.",
    exportable=False,
    requires_automaton=False,
    takes_path=True,
)
def _export(interp: "AutomatonInterpreter", args: str) -> str:
    path = args.strip()
    if not path:
        raise CommandSyntaxError("No file name given.")
    interp.export_file(path)
    return "Export successful!"


@command(
    "import",
    "import <file_name>\n"
    "Discards the current automaton, then opens the file and executes its commands one by one.",
    exportable=False,
    requires_automaton=False,
    takes_path=True,
)
def _import(interp: "AutomatonInterpreter", args: str) -> str:
    path = args.strip()
    if not path:
        raise CommandSyntaxError("No file name given.")
    interp.import_file(path)
    return "File execution successful"


@command(
    "exit",
    "exit\n"
    "The final command for the interpreter. No more commands will be accepted after this call.",
    exportable=False,
    requires_automaton=False,
)
def _exit(interp: "AutomatonInterpreter", args: str) -> str:
    interp.close()
    return "Closing interpreter..."
