"""The shell's built-in commands: echo, cd, pwd, export, unset, env and exit."""

from __future__ import annotations

import os
import re
import stat
import sys
from collections.abc import Callable, Sequence
from contextlib import suppress
from typing import TextIO

from dancingshell.environment import Environment
from dancingshell.models import (
    FLAG_FOUND,
    NO_SUCH_FILE,
    NOT_A_DIRECTORY,
    PERMISSION_DENIED,
    PROGRAM_NAME,
    STAT_FAILED,
    WRONG_ARGUMENTS,
    ShellExit,
    ShellState,
)

LLONG_MAX = 2**63 - 1
LLONG_MIN = -(2**63)

_SPACES = " \t\n\v\f\r"
_LEADING_DIGITS = re.compile(r"[0-9]*")
_SIGNED_DIGITS = re.compile(r"[+-]?[0-9]*")
_FLAG = re.compile(r"-[A-Za-z]+")


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _error(out: TextIO, name: str, message: str, status: int) -> int:
    out.write(f"{name}: {message}\n")
    return status


def parse_long_long(text: str) -> int:
    """Convert the leading integer of text, after optional blanks and one sign."""
    rest = text.lstrip(_SPACES)
    sign = 1
    if rest[:1] in ("-", "+"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    digits = _LEADING_DIGITS.match(rest).group()
    return sign * int(digits) if digits else 0


def _is_long_long(text: str) -> bool:
    """True when text is an optionally signed run of digits within long long range."""
    if not text or not _SIGNED_DIGITS.fullmatch(text):
        return False
    return LLONG_MIN <= parse_long_long(text) <= LLONG_MAX


def search_flags(args: Sequence[str], name: str, out: TextIO | None = None) -> int:
    """Report the first option-like argument; return 2 if one is found, else 0."""
    out = _stream(out)
    for arg in args[1:]:
        if _FLAG.fullmatch(arg):
            out.write(FLAG_FOUND.format(PROGRAM_NAME, name, arg[0], arg[1]))
            return 2
    return 0


def valid_varname(text: str | None) -> int:
    """Classify an export argument.

    Returns 0 for an invalid name, 2 for NAME+=..., 3 for NAME=... and
    4 for a bare NAME.
    """
    if text is None:
        return 1
    if text[:1].isascii() and text[:1].isdigit():
        return 0
    end = 0
    while end < len(text) and (text[end] == "_" or (text[end].isascii() and text[end].isalnum())):
        end += 1
    rest = text[end:]
    if not rest:
        return 4
    if rest.startswith("+="):
        return 2
    if rest.startswith("="):
        return 3
    return 0


def _remove_plus(text: str) -> str:
    return text.replace("+", "", 1)


def get_key(text: str) -> str | None:
    """Return the variable name of an export argument, or None when it has none."""
    if not text:
        return None
    key = text.split("=", 1)[0]
    if "+" in key:
        key = _remove_plus(key)
    return key or None


def _print_export(env: Environment, out: TextIO) -> None:
    for key, value in env.items():
        line = f"declare -x {key}"
        if value is not None:
            line += f'="{value}"'
        out.write(line + "\n")


def _update_environment(env: Environment, arg: str, key: str, code: int) -> None:
    stripped = _remove_plus(arg)
    equals = stripped.find("=")
    value = stripped[equals + 1:] if equals > 0 else None
    if key in env:
        old = env.get(key)
        new = "" if value is None else value
        if code == 2 and old is not None:
            new = old + new
        env.set(key, new)
    else:
        env.set(key, value)


def run_echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; leading -n options drop the newline."""
    out = _stream(out)
    if not args:
        out.write("\n")
        return 1
    words = list(args[1:])
    newline = True
    while words and words[0].startswith("-") and set(words[0][1:]) <= {"n"}:
        newline = False
        words.pop(0)
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        sys.stderr.write(
            "cd: error retrieving current directory: "
            "getcwd: cannot access parent directories: " + NO_SUCH_FILE
        )
        return None


def run_pwd(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the working directory."""
    out = _stream(out)
    if search_flags(args, "pwd", out):
        return 1
    try:
        cwd = os.getcwd()
    except OSError:
        sys.stderr.write(NO_SUCH_FILE)
        return 1
    out.write(cwd + "\n")
    return 0


def _cd_access(path: str, out: TextIO) -> int:
    if not os.path.exists(path):
        return _error(out, "cd", NO_SUCH_FILE, 1)
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return _error(out, "cd", STAT_FAILED, 1)
    if not stat.S_ISDIR(mode):
        return _error(out, "cd", NOT_A_DIRECTORY, 1)
    if not os.access(path, os.X_OK):
        return _error(out, "cd", PERMISSION_DENIED, 1)
    return 0


def run_cd(args: Sequence[str], state: ShellState) -> int:
    """Change directory to the single argument, updating PWD and OLDPWD if set."""
    out = sys.stdout
    if search_flags(args, "cd", out):
        return 2
    if len(args) != 2:
        return _error(out, "cd", WRONG_ARGUMENTS, 1)
    path = args[1]
    status = _cd_access(path, out)
    if status:
        return status
    oldpwd = _getcwd()
    if oldpwd is None:
        return 1
    state.env.change("OLDPWD", oldpwd)
    with suppress(OSError):
        os.chdir(path)
    state.env.change("PWD", _getcwd())
    return 0


def run_env(args: Sequence[str], state: ShellState, out: TextIO | None = None) -> int:
    """Print every variable that has a value as KEY=VALUE."""
    out = _stream(out)
    if search_flags(args, "env", out):
        return 2
    for entry in state.env.as_matrix():
        if "=" in entry:
            out.write(entry + "\n")
    return 0


def run_exit(args: Sequence[str], state: ShellState, interactive: bool = False) -> int:
    """Leave the shell by raising ShellExit; return 1 when given too many arguments."""
    if interactive:
        sys.stderr.write("exit\n")
    if len(args) > 1:
        arg = args[1]
        if _is_long_long(arg):
            state.status = parse_long_long(arg) % 256
        else:
            sys.stderr.write(f"{PROGRAM_NAME} exit: {arg}: numeric argument required\n")
            state.status = 2
            raise ShellExit(state.status)
    if len(args) > 2:
        sys.stderr.write(f"{PROGRAM_NAME} exit: too many arguments\n")
        state.status = 1
        return 1
    raise ShellExit(state.status % 256)


def run_export(args: Sequence[str], state: ShellState, out: TextIO | None = None) -> int:
    """Set or list exported variables."""
    out = _stream(out)
    if search_flags(args, "export", out):
        return 1
    if len(args) < 2:
        _print_export(state.env, out)
        return 0
    for arg in args[1:]:
        key = get_key(arg)
        if key is None:
            return _error(out, "export", "not a valid identifier", 1)
        code = valid_varname(arg)
        if code == 0:
            _error(out, "export", "not a valid identifier", 1)
        else:
            _update_environment(state.env, arg, key, code)
    return 0


def run_unset(args: Sequence[str], state: ShellState) -> int:
    """Remove the named variables; unknown names are ignored."""
    if len(args) < 2:
        return 0
    if search_flags(args, "unset", sys.stdout):
        return 2
    for name in args[1:]:
        if name:
            state.env.remove(name)
    return 0


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError, OSError):
        return False


def run_builtin(
    name: str, args: Sequence[str], state: ShellState, out: TextIO | None = None
) -> int:
    """Run the builtin called name, store its status in state and return it."""
    out = _stream(out)
    handlers: dict[str, Callable[[], int]] = {
        "echo": lambda: run_echo(args, out),
        "cd": lambda: run_cd(args, state),
        "pwd": lambda: run_pwd(args, out),
        "export": lambda: run_export(args, state, out),
        "unset": lambda: run_unset(args, state),
        "env": lambda: run_env(args, state, out),
        "exit": lambda: run_exit(args, state, _stdin_is_tty()),
    }
    try:
        handler = handlers[name]
    except KeyError:
        raise ValueError(f"{name}: not a builtin") from None
    status = handler()
    state.status = status
    return status