"""Group tokens into commands and run them, alone or as a pipeline."""

from __future__ import annotations

import copy
import io
import os
import signal
import stat
import subprocess
import sys
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import suppress
from typing import IO, TextIO, Union

from dancingshell.builtins import run_builtin
from dancingshell.environment import Environment
from dancingshell.models import (
    BUILTIN_NAMES,
    COMMAND_NOT_FOUND,
    IS_DIR,
    IS_F_EXEC,
    NOT_FOUND,
    Command,
    ShellExit,
    ShellState,
    Token,
    TokenType,
)

_FILE_MODE = 0o644

_Stdin = Union[IO, int, None]


class _RedirectionError(Exception):
    """A redirection target could not be opened."""


def verify_path(path: str) -> int:
    """Return IS_DIR, IS_F_EXEC, or NOT_FOUND (0) for anything else."""
    if not os.access(path, os.F_OK):
        return NOT_FOUND
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return NOT_FOUND
    if stat.S_ISDIR(mode):
        return IS_DIR
    if os.access(path, os.X_OK):
        return IS_F_EXEC
    return NOT_FOUND


def search_in_path(env: Environment, name: str) -> str | None:
    """Return the first executable dir/name over the PATH entries, or None."""
    path_value = env.get("PATH")
    if not path_value:
        return None
    for directory in filter(None, path_value.split(":")):
        candidate = f"{directory}/{name}"
        if verify_path(candidate) == IS_F_EXEC:
            return candidate
    return None


def is_builtin(name: str) -> bool:
    """True when name is one of the shell's own commands."""
    return name in BUILTIN_NAMES


def _release(fd: int) -> None:
    if fd not in (0, 1, 2):
        with suppress(OSError):
            os.close(fd)


def _close_command(cmd: Command) -> None:
    _release(cmd.in_fd)
    _release(cmd.out_fd)
    cmd.in_fd, cmd.out_fd = 0, 1


def _open(path: str, flags: int, report: bool) -> int:
    try:
        return os.open(path, flags, _FILE_MODE)
    except OSError as exc:
        if report:
            sys.stderr.write(f"{path}: {exc.strerror}\n")
        raise _RedirectionError(path) from exc


def _apply_redirection(
    cmd: Command, kind: TokenType, target: Token | None, state: ShellState
) -> None:
    if kind is TokenType.HERE_DOC:
        _release(cmd.in_fd)
        cmd.in_fd = 0
        cmd.in_fd = _open(state.heredoc_path, os.O_RDONLY, report=False)
        return
    if target is None:
        raise _RedirectionError("missing target")
    if kind is TokenType.INPUT:
        _release(cmd.in_fd)
        cmd.in_fd = 0
        cmd.in_fd = _open(target.content, os.O_RDONLY, report=True)
        return
    flags = os.O_WRONLY | os.O_CREAT
    flags |= os.O_TRUNC if kind is TokenType.OUTPUT else os.O_APPEND
    _release(cmd.out_fd)
    cmd.out_fd = 1
    cmd.out_fd = _open(target.content, flags, report=kind is TokenType.APPEND)


def _resolve(cmd: Command, words: list[str], state: ShellState) -> bool:
    name = words[0]
    if is_builtin(name):
        cmd.builtin = True
        cmd.path = name
        cmd.args = list(words)
        return True
    if verify_path(name) == IS_F_EXEC:
        cmd.path = name
        cmd.args = list(words)
        return True
    found = search_in_path(state.env, name)
    if found is None:
        sys.stderr.write(name + COMMAND_NOT_FOUND)
        state.status = 127
        return False
    cmd.path = found
    cmd.args = [found, *words[1:]]
    return True


def _segments(tokens: Iterable[Token]) -> Iterator[list[Token]]:
    segment: list[Token] = []
    for token in tokens:
        if token.type is TokenType.SPC:
            continue
        if token.type is TokenType.PIPE:
            yield segment
            segment = []
        else:
            segment.append(token)
    yield segment


def _build_command(segment: list[Token], state: ShellState) -> Command | None:
    words: list[str] = []
    redirections: list[tuple[TokenType, Token | None]] = []
    stream = iter(segment)
    for token in stream:
        if token.type.is_redirection():
            redirections.append((token.type, next(stream, None)))
        elif token.type.is_text():
            words.append(token.content)

    cmd = Command()
    try:
        for kind, target in redirections:
            _apply_redirection(cmd, kind, target, state)
    except _RedirectionError:
        _close_command(cmd)
        return None
    if not words or not _resolve(cmd, words, state):
        _close_command(cmd)
        return None
    return cmd


def build_commands(tokens: Iterable[Token], state: ShellState) -> list[Command]:
    """Split tokens on pipes into resolved commands with redirections opened.

    A command whose name cannot be found or whose redirection fails is left
    out; an unknown name sets the status to 127.
    """
    commands = []
    for segment in _segments(tokens):
        if not segment:
            continue
        cmd = _build_command(segment, state)
        if cmd is not None:
            commands.append(cmd)
    return commands


def status_from_returncode(returncode: int) -> int | None:
    """Map a child's return code to a shell status.

    Death by SIGINT gives 130 and by SIGQUIT 131; other signals give None,
    leaving the previous status in place.
    """
    if returncode >= 0:
        return returncode
    if returncode == -signal.SIGINT:
        return 130
    if returncode == -signal.SIGQUIT:
        return 131
    return None


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _run_isolated(cmd: Command, state: ShellState, sink: TextIO | None) -> int:
    """Run a builtin as a pipeline member: its changes do not reach the shell."""
    child = copy.deepcopy(state)
    cwd = _getcwd()
    try:
        return run_builtin(cmd.path, cmd.args, child, sink)
    except ShellExit as exc:
        return exc.code
    finally:
        if cwd is not None:
            with suppress(OSError):
                os.chdir(cwd)


def _start_builtin(
    cmd: Command, state: ShellState, has_next: bool
) -> tuple[int, _Stdin]:
    if has_next:
        sink = tempfile.TemporaryFile("w+")
        code = _run_isolated(cmd, state, sink)
        sink.flush()
        sink.seek(0)
        return code, sink
    if cmd.out_fd != 1:
        with open(cmd.out_fd, "w", closefd=False) as sink:
            return _run_isolated(cmd, state, sink), None
    return _run_isolated(cmd, state, None), None


def _start_external(
    cmd: Command, env: dict[str, str], stdin: _Stdin, has_next: bool
) -> tuple[subprocess.Popen | int, _Stdin]:
    if has_next:
        stdout: int | None = subprocess.PIPE
    else:
        stdout = cmd.out_fd if cmd.out_fd != 1 else None
    sys.stdout.flush()
    try:
        proc = subprocess.Popen(
            cmd.args, executable=cmd.path, stdin=stdin, stdout=stdout, env=env
        )
    except OSError as exc:
        sys.stderr.write(f"execve: {exc.strerror}\n")
        return 1, (subprocess.DEVNULL if has_next else None)
    return proc, (proc.stdout if has_next else None)


def _discard(stream: _Stdin) -> None:
    if isinstance(stream, io.IOBase):
        stream.close()


def _wait(proc: subprocess.Popen) -> int:
    while True:
        try:
            return proc.wait()
        except KeyboardInterrupt:
            continue


def _run_pipeline(commands: list[Command], state: ShellState) -> int:
    env = {key: value for key, value in state.env.items() if value is not None}
    pending: list[subprocess.Popen | int] = []
    previous: _Stdin = None
    for index, cmd in enumerate(commands):
        has_next = index + 1 < len(commands)
        stdin = cmd.in_fd if cmd.in_fd != 0 else previous
        if cmd.builtin:
            entry, produced = _start_builtin(cmd, state, has_next)
        else:
            entry, produced = _start_external(cmd, env, stdin, has_next)
        _discard(previous)
        previous = produced
        pending.append(entry)
    _discard(previous)
    codes = [
        _wait(entry) if isinstance(entry, subprocess.Popen) else entry
        for entry in pending
    ]
    return codes[-1]


def _run_single_builtin(cmd: Command, state: ShellState) -> int:
    if cmd.out_fd == 1:
        return run_builtin(cmd.path, cmd.args, state)
    with open(cmd.out_fd, "w", closefd=False) as sink:
        return run_builtin(cmd.path, cmd.args, state, sink)


def execute(tokens: Iterable[Token], state: ShellState) -> int:
    """Run the command line in tokens and return the resulting status.

    A lone builtin runs in the shell itself and may raise ShellExit; anything
    else runs as a pipeline of child processes.
    """
    commands = build_commands(tokens, state)
    if not commands:
        return state.status
    try:
        if state.interrupted:
            return state.status
        if len(commands) == 1 and commands[0].builtin:
            state.status = _run_single_builtin(commands[0], state)
            return state.status
        code = _run_pipeline(commands, state)
        if code == -signal.SIGINT:
            sys.stdout.write("\n")
        elif code == -signal.SIGQUIT:
            sys.stdout.write("Quit (Core dumped)\n")
        status = status_from_returncode(code)
        if status is not None:
            state.status = status
        return state.status
    finally:
        for cmd in commands:
            _close_command(cmd)