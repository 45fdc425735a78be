"""
Rewrites applied to argv before Typer parses it.

    meta-composer -V                       ->  meta-composer --version
    meta-composer help openapi show        ->  meta-composer openapi show --help
    meta-composer openapi help show        ->  meta-composer openapi show --help
    meta-composer nvim buffers --debug     ->  meta-composer --debug nvim buffers

Tokens after a ``--`` separator are passed through unchanged.
"""

VERSION_ALIAS = "-V"
HELP_WORD = "help"
GLOBAL_FLAGS = ("--debug",)

# A help path names at most a resource and one of its commands
_HELP_DEPTH = 2


def split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first ``--``; the separator stays with the tail."""
    if "--" in argv:
        cut = argv.index("--")
        return argv[:cut], argv[cut:]
    return list(argv), []


def help_path(words: list[str]) -> list[str] | None:
    """
    Command path a ``help`` word asks about, or None if there is no such word.

    ``help`` is recognised before the resource (``help openapi show``) or
    right after it (``openapi help show``). Options are ignored.
    """
    positional = [word for word in words if not word.startswith("-")]
    if positional[:1] == [HELP_WORD]:
        path = positional[1:]
    elif positional[1:2] == [HELP_WORD]:
        path = positional[:1] + positional[2:]
    else:
        return None
    return [word for word in path if word != HELP_WORD][:_HELP_DEPTH]


def preprocess_argv(argv: list[str]) -> list[str]:
    """Normalize argv for Typer.

    ``-V`` must be the first token. Global flags are moved in front of the
    resource so they reach the root callback, and appear once.
    """
    head, tail = split_passthrough(argv)

    if head[:1] == [VERSION_ALIAS]:
        return ["--version"]

    path = help_path(head)
    if path is not None:
        return [*path, "--help"]

    flags = [flag for flag in GLOBAL_FLAGS if flag in head]
    words = [token for token in head if token not in GLOBAL_FLAGS]
    return [*flags, *words, *tail]
