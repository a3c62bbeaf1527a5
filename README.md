# dancingshell

The stages of a small POSIX command shell as a Python library. Given a
command line it splits it into tokens, checks pipes and redirections,
expands `$VARIABLES`, and runs the result as a pipeline of builtins and
external programs, keeping the environment and the last exit status in a
`ShellState` between calls.

## What it understands

- Words, single-quoted strings (taken literally) and double-quoted strings
  (with `$` expansion). An unclosed quote runs to the end of the line.
- Pipes: `ls | grep py | wc -l`. `||` is rejected as a syntax error.
- Redirections: `<`, `>`, `>>` and here-documents with `<<`.
- Variable expansion: `$NAME`, and `$?` for the status of the last command.
  Unset names expand to nothing.
- Builtins: `echo` (with `-n`), `cd`, `pwd`, `export`, `unset`, `env`, `exit`.
  Apart from `echo`, the builtins refuse option-like arguments such as `-L`
  with the message `options are not allowed`.

## Using it

```python
from dancingshell.environment import Environment
from dancingshell.expansion import expand_string, expand_tokens
from dancingshell.models import ShellState, ShellSyntaxError
from dancingshell.syntax import check_syntax
from dancingshell.tokenizer import tokenize
from dancingshell.executor import execute

env = Environment.from_mapping({"USER": "alice", "HOME": "/home/alice"})

print(expand_string("hello $USER", env, 0))   # hello alice
print(expand_string("status: $?", env, 127))  # status: 127

state = ShellState(env=Environment.from_mapping({"PATH": "/usr/bin:/bin"}))
try:
    tokens = check_syntax(tokenize('echo "hi $USER" | cat > out.txt'))
except ShellSyntaxError as exc:
    print(exc.message, end="")   # e.g. dancingShell: syntax error near unexpected token `|'
    state.status = exc.status    # 2
else:
    tokens = expand_tokens(tokens, state.env, state.status)
    print(execute(tokens, state))
```

### Modules

- `dancingshell.models` – `TokenType`, the `Token` and `Command` records,
  `ShellState` (environment, last status, interrupted flag, here-document
  file path), and the `ShellSyntaxError` (with `token`, `message` and
  `status == 2`) and `ShellExit` (with `code`) exceptions.
- `dancingshell.environment.Environment` – variables in insertion order;
  `get`, `set`, `change` (only an existing name), `remove`, `items`, and
  `as_matrix()` giving `KEY=VALUE` strings (bare `KEY` for a name exported
  without a value).
- `dancingshell.tokenizer.tokenize` – turns a line into a list of tokens.
- `dancingshell.syntax` – `check_syntax` validates pipes, redirections and
  the limit of 16 here-documents; `syntax_message` builds the error line.
- `dancingshell.expansion` – `expand_string` and `expand_tokens`. An
  expanded, non-empty unquoted word that is not the last token is split into
  tokens again.
- `dancingshell.builtins` – `run_echo`, `run_cd`, `run_pwd`, `run_export`,
  `run_unset`, `run_env`, `run_exit`, and `run_builtin`, which dispatches by
  name and stores the status in the state. `run_exit` raises `ShellExit`
  (returning 1 instead when given too many arguments). Helpers:
  `parse_long_long`, `search_flags`, `valid_varname`, `get_key`.
- `dancingshell.heredoc` – `heredoc_delimiters` finds the delimiter after
  each `<<`; `write_heredoc` copies lines to a file up to the delimiter and
  warns when input ends first.
- `dancingshell.executor` – `build_commands` splits tokens on pipes, opens
  redirections and resolves names against `PATH` (`search_in_path`,
  `verify_path`, `is_builtin`); `execute` runs a lone builtin inside the
  current process and anything else as a pipeline of child processes, in
  which builtins run on a copy of the state.

### Here-documents

`execute` reads a `<<` redirection from the file at `state.heredoc_path`
(`/tmp/dancingshell_heredoc` by default). Fill it first, for example:

```python
import sys
from dancingshell.heredoc import heredoc_delimiters, write_heredoc

for delimiter in heredoc_delimiters(tokens):
    with open(state.heredoc_path, "w") as body:
        write_heredoc(delimiter, sys.stdin, body)
```

## Exit status

The status of a pipeline is that of its last command. A command that cannot
be found gives 127; a child ended by SIGINT gives 130 and by SIGQUIT 131
(`status_from_returncode`). `exit` takes its status modulo 256 and rejects
non-numeric or out-of-range arguments with status 2.

## What it does not do

The package has no interactive program: there is no command to install, no
prompt loop, no line editing or history, and no signal handling at the
prompt. Reading lines, calling the stages in order and acting on
`ShellExit` is left to the caller. There is no globbing, no `;`, `&&`,
`||`, subshells or job control.