"""A small interactive shell with pipes, redirections, here-documents and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "checker",
    "environment",
    "executor",
    "expander",
    "export",
    "heredoc",
    "lexer",
    "parser",
    "shell",
]