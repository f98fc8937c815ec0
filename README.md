# minishell

A small interactive shell for POSIX systems. For each line it checks the
syntax, splits the line into tokens, expands variables, removes quotes,
collects here-documents and runs the resulting pipeline.

## Features

- Pipelines: `ls | wc -l`
- Redirections: `<`, `>`, `>>` and here-documents with `<<`. When a command
  has several input or output redirections, every file is opened in order and
  the last one of each kind is used. Output files are created with mode 0644.
- Variable expansion: `$NAME` and `$?` (the last exit status). Nothing is
  expanded inside single quotes; `$$` is left as it is. A word that starts
  with an unset variable is dropped.
- Quote removal for single and double quotes.
- Builtins: `echo` (with `-n`), `cd`, `pwd`, `env`, `export`, `unset`, `exit`.
- Other commands are looked up through `PATH`, or run directly when the name
  contains a `/`. A command that cannot be found ends with status 127; a
  directory or a file without execute permission ends with status 126.
- At most 16 here-documents per line; more ends the shell with status 2.
  Here-documents are written to `.here_doc1`, `.here_doc2`, … in the system
  temporary directory and deleted once the line has run.

A line is rejected with a syntax error when its quotes are not closed, when it
starts or ends with a pipe, or when it holds, outside quotes and before its
last character, one of `&`, `;`, `%`, `,`, `(`, `)`, a tab or other control
whitespace, or the operators `||` and `|&`. A redirection with no file name
after it is also rejected, with status 2.

## Builtins

- `echo [-n] words…` prints the words separated by spaces. `-n`, `-nn`, …
  leaves out the final newline.
- `cd [dir]` changes directory (to `HOME` without an argument) and updates
  `PWD`. More than one argument is an error.
- `pwd` prints `PWD` when it names an existing path, the working directory
  otherwise.
- `env` prints every variable; it takes no arguments.
- `export` with no arguments prints the variables sorted by name as
  `export NAME=value`. With arguments it sets or creates variables;
  names may hold only letters and `_`.
- `unset NAME…` removes variables.
- `exit [n]` leaves the shell with status `n` (modulo 256). Without an
  argument it leaves with status 1; a non-numeric argument leaves with
  status 2; more than one argument prints an error and stays.

A lone `cd`, `export`, `unset`, `pwd` or `exit` runs in the shell itself and
changes its state; its redirections are opened but its output is not sent to
them. Inside a pipeline, and for `echo` and `env`, a builtin works on a copy
of the shell's state and its output follows the pipeline's redirections.

## Installation

```
pip install .
```

## Usage

Start the shell with no arguments (arguments are refused):

```
minishell
```

At the `minishell$ ` prompt, type commands as in any shell:

```
echo "hello $USER" | tr a-z A-Z > out.txt
cat << EOF
first line
EOF
export GREETING=hi
env
exit 3
```

Press Ctrl-D on an empty prompt to leave the shell. Ctrl-C abandons the
current line or here-document and sets the status to 130. The lines `:` and
`#` set the status to 0, and `!` sets it to 1.

## Use from Python

The `Shell` class in `minishell.shell` runs lines programmatically:

```python
import io
from minishell.shell import Shell

out = io.StringIO()
shell = Shell({"PATH": "/usr/bin:/bin"}, None, out, None)
status = shell.run_line("echo hello")
print(out.getvalue(), status)
```

`Shell.run_line` returns the new exit status and raises
`minishell.builtins.ShellExit` when the line runs `exit`. `Shell.loop` reads
lines with the `read_line` callable given to the constructor (by default,
from the terminal) until end of input or `exit`, and returns the final status.

The lower layers can be used separately: `minishell.lexer.tokenize`,
`minishell.expander.expand_tokens`, `minishell.checker.check_line`,
`minishell.heredoc.process_heredocs`, `minishell.parser.parse_commands` and
`minishell.executor.run_pipeline`. The variable table is
`minishell.environment.Environment`.

## What it does not do

There are no command lists (`;`, `&&`, `||`), no background jobs or job
control, no subshells or grouping, no filename wildcards, no variable
assignments outside `export`, and no script files: the shell only reads lines
interactively. A process killed by a signal is reported with status 0.

## Running the tests

```
pip install .[test]
pytest
```