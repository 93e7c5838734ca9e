from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .automata import Automaton, AutomatonError
from .commands import COMMAND_DELIMITER, COMMANDS, RESERVED_WORDS
from .errors import (
    CommandSyntaxError,
    ErrorKind,
    ExecutionError,
    FatalError,
    ImportCycleError,
    InterpreterClosedError,
    InterpreterError,
)
from .preprocessor import COMMENT_RE, describe_directive, directive_names, preprocess

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BANNER = (
    "Type 'exit' to terminate the interpreter, or type 'help' for a list of commands.\n"
    "Note: All commands are NOT case-sensitive."
)


@dataclass(frozen=True)
class CommandResult:
    success: bool
    message: str
    kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, error: InterpreterError) -> "CommandResult":
        return cls(False, str(error), error.kind)


@dataclass(frozen=True)
class BatchResult:
    success: bool
    results: Tuple[CommandResult, ...] = ()
    failed_index: Optional[int] = None
    failed_command: Optional[str] = None
    message: str = ""
    kind: Optional[ErrorKind] = None

    @property
    def messages(self) -> List[str]:
        return [result.message for result in self.results if result.success]


def split_commands(code: str) -> List[str]:
    """Split preprocessed text into single commands, dropping blank ones."""
    code = code.replace("\n", " ").replace("\t", " ")
    return [part.strip() for part in code.split(COMMAND_DELIMITER) if part.strip()]


def _keyword(line: str) -> Tuple[str, str]:
    parts = line.split(None, 1)
    if not parts:
        return "", ""
    args = parts[1].strip() if len(parts) > 1 else ""
    return parts[0].lower(), args


class AutomatonInterpreter:
    """Runs command text against one automaton and remembers what succeeded.

    The interpreter starts without an automaton; ``create`` installs one and
    wipes the command record. After ``exit`` (or :meth:`close`) every further
    command is refused.
    """

    def __init__(self) -> None:
        self._automaton: Optional[Automaton] = None
        self._record: List[str] = []
        self._closed = False
        self._active_imports: List[Path] = []
        self._successful = True

    # ---------------------------------------------------------------
    @property
    def automaton(self) -> Optional[Automaton]:
        return self._automaton

    @property
    def record(self) -> Tuple[str, ...]:
        return tuple(self._record)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def was_successful(self) -> bool:
        """Whether the last command or batch ran without errors."""
        return self._successful

    def replace_automaton(self, automaton: Automaton) -> None:
        self._automaton = automaton
        self._record = []

    def reset(self) -> None:
        self._automaton = None
        self._record = []

    def close(self) -> None:
        self._automaton = None
        self._record = []
        self._closed = True

    # ---------------------------------------------------------------
    def execute_command(self, line: str) -> CommandResult:
        if self._closed:
            raise InterpreterClosedError("The interpreter can not accept commands when closed.")
        line = line.strip()
        keyword, args = _keyword(line)
        command = COMMANDS.get(keyword)
        logger.debug("Dispatching %r", line)

        if command is None:
            result = CommandResult.failure(CommandSyntaxError(f'Unknown command "{keyword}"'))
        elif self._automaton is None and command.requires_automaton:
            result = CommandResult.failure(
                ExecutionError("No defined automaton: See 'help create'")
            )
        else:
            try:
                result = CommandResult(True, command.run(self, args))
            except InterpreterError as exc:
                result = CommandResult.failure(exc)
            except AutomatonError as exc:
                result = CommandResult.failure(ExecutionError(str(exc)))
            except OSError as exc:
                result = CommandResult.failure(
                    ExecutionError(str(exc) or "An error occurred while opening the file")
                )

        if result.success and not self._closed:
            self._record.append(line)
        if not result.success:
            logger.warning("Command %r failed: %s", line, result.message)
        self._successful = result.success
        return result

    def execute_batch(self, code: str) -> BatchResult:
        """Preprocess `code` and run its commands in order, stopping at the first failure."""
        if self._closed:
            raise InterpreterClosedError("The interpreter can not accept commands when closed.")
        if not code.strip():
            return self._batch_failure(CommandSyntaxError("No text found."))
        try:
            commands = split_commands(preprocess(code))
        except CommandSyntaxError as exc:
            return self._batch_failure(exc)

        results: List[CommandResult] = []
        for index, line in enumerate(commands, start=1):
            if self._closed:
                break
            result = self.execute_command(line)
            results.append(result)
            if not result.success:
                self._successful = False
                return BatchResult(
                    False,
                    tuple(results),
                    failed_index=index,
                    failed_command=line,
                    message=f'{result.message}\n\tat command number {index}, "{line}"',
                    kind=result.kind,
                )
        self._successful = True
        return BatchResult(True, tuple(results))

    def _batch_failure(self, error: InterpreterError) -> BatchResult:
        self._successful = False
        return BatchResult(False, message=str(error), kind=error.kind)

    # ---------------------------------------------------------------
    def import_file(self, path: PathLike) -> BatchResult:
        """Discard the current session and replay the script at `path`."""
        resolved = Path(path).expanduser().resolve()
        if resolved in self._active_imports:
            raise ImportCycleError(f"{path} is already being imported.")
        code = resolved.read_text(encoding="utf-8")
        logger.info("Importing %s", resolved)

        self.reset()
        self._active_imports.append(resolved)
        try:
            result = self.execute_batch(code)
        finally:
            self._active_imports.pop()
        if not result.success:
            error_type = FatalError if result.kind == ErrorKind.FATAL else ExecutionError
            raise error_type(f"Import of {path} failed:\n{result.message}")
        return result

    def exportable_record(self) -> List[str]:
        lines: List[str] = []
        for line in self._record:
            keyword, _ = _keyword(line)
            command = COMMANDS.get(keyword)
            if command is not None and command.exportable:
                lines.append(line)
        return lines

    def export_file(self, path: PathLike) -> int:
        """Write every exportable command of the session to `path`, one per line."""
        lines = self.exportable_record()
        target = Path(path).expanduser()
        with open(target, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(line + COMMAND_DELIMITER + "\n")
        logger.info("Exported %d command(s) to %s", len(lines), target)
        return len(lines)

    # ---------------------------------------------------------------
    def describe(self, name: str) -> str:
        command = COMMANDS.get(name.lower())
        if command is not None:
            return command.usage
        description = describe_directive(name)
        if description is None:
            raise CommandSyntaxError(f"Cannot get description: {name} is not a valid command")
        return description

    @staticmethod
    def primary_commands() -> List[str]:
        return sorted(COMMANDS)

    @staticmethod
    def directive_names() -> List[str]:
        return directive_names()

    reserved_words = RESERVED_WORDS
    comment_regex = COMMENT_RE


def check_script(code: str) -> BatchResult:
    """Run `code` on a throwaway interpreter and report whether it would succeed."""
    return AutomatonInterpreter().execute_batch(code)
