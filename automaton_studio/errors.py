from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    SYNTAX = "syntax"
    EXECUTION = "execution"
    FATAL = "fatal"


class InterpreterError(Exception):
    """A command was refused. The message carries a tag naming the failure kind."""

    kind = ErrorKind.EXECUTION
    tag = "Execution Error: "

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.detail = message

    def __str__(self) -> str:
        return self.tag + self.detail


class CommandSyntaxError(InterpreterError):
    kind = ErrorKind.SYNTAX
    tag = "Syntax Error: "


class ExecutionError(InterpreterError):
    pass


class PreprocessorError(CommandSyntaxError):
    pass


class FatalError(InterpreterError):
    kind = ErrorKind.FATAL
    tag = "Fatal Error: "


class InterpreterClosedError(FatalError):
    pass


class ImportCycleError(FatalError):
    pass


TOO_FEW_PARAMETERS = (
    "Too few parameters for command call; Use the 'help' command for a valid definition."
)
