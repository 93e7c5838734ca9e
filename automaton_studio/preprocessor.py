"""A very small C-like preprocessor turning editor text into interpreter commands.

Supported directives::

    #namedef OLD NEW;   replace every OLD token with NEW
    #define SYMBOL;     define a symbol for conditional blocks
    #ifdef SYMBOL;      skip the block unless SYMBOL is defined
    #ifndef SYMBOL;     skip the block if SYMBOL is defined
    #endif;             close the conditional block

Conditional blocks do not nest: a second ``#ifdef`` replaces the state of the
first one and the first ``#endif`` closes both.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from .commands import COMMAND_DELIMITER, COMMANDS
from .errors import PreprocessorError

logger = logging.getLogger(__name__)

COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
REPEATED_DELIMITER_RE = re.compile(re.escape(COMMAND_DELIMITER) + "+")
LINE_BREAK_RE = re.compile(r"[\r\n\t]")
PUNCTUATION_RE = re.compile(r"(->|[,:])")


@dataclass
class ToolSet:
    macros: Dict[str, str] = field(default_factory=dict)
    symbols: Set[str] = field(default_factory=set)
    ignore: bool = False
    open_block: bool = False
    lines: List[str] = field(default_factory=list)


DirectiveHandler = Callable[[List[str], ToolSet], None]


@dataclass(frozen=True)
class Directive:
    identifier: str
    syntax: str
    description: str
    operands: int
    handler: DirectiveHandler = field(repr=False, compare=False)
    runs_when_ignored: bool = False

    def __str__(self) -> str:
        return f"{self.syntax}\n\t{self.description}"


DIRECTIVES: Dict[str, Directive] = {}


def _directive(
    identifier: str,
    operands: int,
    syntax: str,
    description: str,
    *,
    runs_when_ignored: bool = False,
) -> Callable[[DirectiveHandler], DirectiveHandler]:
    def register(handler: DirectiveHandler) -> DirectiveHandler:
        DIRECTIVES[identifier] = Directive(
            identifier, syntax, description, operands, handler, runs_when_ignored
        )
        return handler

    return register


@_directive(
    "#namedef",
    2,
    "#namedef [old string] [replacement string];",
    "Replaces all occurrences of [old string] with [replacement string].",
)
def _namedef(operands: List[str], tools: ToolSet) -> None:
    old, new = operands
    if old.lower() in COMMANDS:
        raise PreprocessorError("Commands cannot be overwritten.")
    logger.debug("Macro %r -> %r", old, new)
    tools.macros[old] = new


@_directive(
    "#define",
    1,
    "#define [Symbol];",
    "Defines a new symbol that is used to form conditional blocks. See #ifdef and #ifndef.",
)
def _define(operands: List[str], tools: ToolSet) -> None:
    logger.debug("Symbol %r defined", operands[0])
    tools.symbols.add(operands[0])


@_directive(
    "#ifdef",
    1,
    "#ifdef [Symbol];",
    "Starts a conditional block. If [Symbol] has NOT been defined, the commands in the block are ignored.",
)
def _ifdef(operands: List[str], tools: ToolSet) -> None:
    tools.open_block = True
    tools.ignore = operands[0] not in tools.symbols


@_directive(
    "#ifndef",
    1,
    "#ifndef [Symbol];",
    "Starts a conditional block. If [Symbol] HAS been defined, the commands in the block are ignored.",
)
def _ifndef(operands: List[str], tools: ToolSet) -> None:
    tools.open_block = True
    tools.ignore = operands[0] in tools.symbols


@_directive("#endif", 0, "#endif;", "Ends the conditional block.", runs_when_ignored=True)
def _endif(operands: List[str], tools: ToolSet) -> None:
    tools.open_block = False
    tools.ignore = False


def tokenize(line: str) -> List[str]:
    """Split a command line on whitespace, keeping ',', ':' and '->' as their own tokens."""
    return PUNCTUATION_RE.sub(r" \1 ", line).split()


def _emit(line: str, tools: ToolSet) -> None:
    keyword, _, rest = line.partition(" ")
    command = COMMANDS.get(keyword.lower())
    if command is not None and command.takes_path:
        # file names keep their ':' ',' and '->' untouched
        tools.lines.append(f"{keyword} {rest.strip()}".rstrip() + COMMAND_DELIMITER + "\n")
        return
    tokens = [tools.macros.get(token, token) for token in tokenize(line)]
    tools.lines.append(" ".join(tokens) + COMMAND_DELIMITER + "\n")


def _error(message: str, line: str) -> PreprocessorError:
    return PreprocessorError(f"{message}\n\tat command {line}")


def preprocess(code: str) -> str:
    """Return `code` as interpreter-ready text, one ';'-terminated command per line.

    Raises PreprocessorError when a directive is malformed or a conditional
    block is left open.
    """
    tools = ToolSet()
    bare = COMMENT_RE.sub("", code)
    bare = LINE_BREAK_RE.sub(" ", bare)
    bare = REPEATED_DELIMITER_RE.sub(COMMAND_DELIMITER, bare)

    for raw in bare.split(COMMAND_DELIMITER):
        line = raw.strip()
        if not line:
            continue
        words = line.split()
        directive = DIRECTIVES.get(words[0].lower())
        if directive is None:
            if not tools.ignore:
                _emit(line, tools)
            continue
        if tools.ignore and not directive.runs_when_ignored:
            continue
        operands = words[1:]
        if len(operands) != directive.operands:
            raise _error(f"Invalid number of arguments in {directive.identifier}", line)
        try:
            directive.handler(operands, tools)
        except PreprocessorError as exc:
            raise _error(exc.detail, line) from exc

    if tools.open_block:
        raise PreprocessorError(
            "Expected #endif before end of file as a conditional block is open."
        )
    return "".join(tools.lines)


def directive_names() -> List[str]:
    return list(DIRECTIVES)


def describe_directive(name: str) -> Optional[str]:
    directive = DIRECTIVES.get(name.lower())
    return None if directive is None else str(directive)
