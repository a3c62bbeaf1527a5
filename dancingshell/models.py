"""Core data types shared by the shell's stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from dancingshell.environment import Environment

PROGRAM_NAME = "dancingShell🩰🦦:"

SYNTAX_ERROR_STATUS = 2
SYNTAX_ERROR_PREFIX = "dancingShell: syntax error near unexpected token `"
QUOTE_FORMAT_ERROR = "quotes not closed correctly"

PATH_NULL = "Path is NULL"
INVALID_PATH = "Invalid path"
NO_SUCH_FILE = "No such file or directory"
NOT_A_DIRECTORY = "Not a directory"
PERMISSION_DENIED = "Permission denied"
WRONG_ARGUMENTS = "Wrong number of arguments"
STAT_FAILED = "Stat function failed"
COMMAND_NOT_FOUND = ": command not found\n"
FLAG_FOUND = "{} {}: {}{}: options are not allowed\n"

BUILTIN_NAMES = ("echo", "cd", "pwd", "export", "unset", "env", "exit")

IS_DIR = 2
IS_F_EXEC = 1
NOT_FOUND = 0

HEREDOC_PATH = "/tmp/dancingshell_heredoc"


class TokenType(enum.IntEnum):
    """Kinds of lexical tokens, in the order the syntax checks rely on."""

    SPC = 0
    WORD = 1
    SQ_STR = 2
    DQ_STR = 3
    PIPE = 4
    INPUT = 5
    OUTPUT = 6
    APPEND = 7
    HERE_DOC = 8
    ENV_VAR = 9

    def is_redirection(self) -> bool:
        """True for <, >, >> and <<."""
        return TokenType.INPUT <= self <= TokenType.HERE_DOC

    def is_text(self) -> bool:
        """True for plain words and quoted strings."""
        return self in (TokenType.WORD, TokenType.SQ_STR, TokenType.DQ_STR)


@dataclass(frozen=True)
class Token:
    """A single lexical token."""

    type: TokenType
    content: str = ""


@dataclass
class Command:
    """One simple command of a pipeline, ready to run."""

    path: str | None = None
    args: list[str] = field(default_factory=list)
    builtin: bool = False
    in_fd: int = 0
    out_fd: int = 1

    @property
    def nargs(self) -> int:
        return len(self.args)


@dataclass
class ShellState:
    """Everything the shell keeps between prompts."""

    env: Environment = field(default_factory=Environment)
    status: int = 0
    interrupted: bool = False
    heredoc_path: str = HEREDOC_PATH


class ShellSyntaxError(Exception):
    """Raised when a command line is not well formed."""

    status = SYNTAX_ERROR_STATUS

    def __init__(self, token: str, message: str) -> None:
        self.token = token
        self.message = message
        super().__init__(message.rstrip("\n"))


class ShellExit(Exception):
    """Raised to leave the shell with the given exit status."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(code)