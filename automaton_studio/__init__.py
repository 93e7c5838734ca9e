from .automata import DFA, NFA, Automaton, AutomatonError, create_automaton
from .cli import run
from .errors import CommandSyntaxError, ErrorKind, ExecutionError, InterpreterError
from .interpreter import AutomatonInterpreter, BatchResult, CommandResult, check_script
from .preprocessor import preprocess

__all__ = [
    "Automaton",
    "AutomatonError",
    "AutomatonInterpreter",
    "BatchResult",
    "CommandResult",
    "CommandSyntaxError",
    "DFA",
    "ErrorKind",
    "ExecutionError",
    "InterpreterError",
    "NFA",
    "check_script",
    "create_automaton",
    "preprocess",
    "run",
]
