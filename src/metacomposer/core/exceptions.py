"""
Exception hierarchy for meta-composer.

Exception Hierarchy:
    MetaComposerError (base)
    ├── DuplicateNameError (two modules share a name; fatal at startup)
    ├── NotFoundError (no module registered under a name)
    ├── MetadataError (meta.yaml missing or incomplete)
    ├── InvalidArgumentError (bad handler input)
    ├── FetchError (document could not be loaded)
    └── ExternalToolError (external program unreachable)

The RPC client has its own family rooted at RPCError (core.nvim.rpc),
which also derives from MetaComposerError.

Example:
    >>> from metacomposer.core.exceptions import NotFoundError
    >>> try:
    ...     raise NotFoundError("shadcn", ["openapi", "nvim"])
    ... except NotFoundError as e:
    ...     print(e)
    Unknown resource 'shadcn'. Available resources: openapi, nvim
"""

from collections.abc import Sequence


class MetaComposerError(Exception):
    """
    Base exception for all meta-composer errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class DuplicateNameError(MetaComposerError):
    """
    Raised when a resource module is registered under a name already in use.

    This is a configuration mistake, not a runtime condition: it aborts
    startup before any command line is parsed.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f'Resource "{name}" is already registered', name=name)
        self.name = name


class NotFoundError(MetaComposerError):
    """
    Raised when a resource name has no registered module.

    Attributes:
        name: The name that was looked up
        available: Registered names at the time of the lookup
    """

    def __init__(self, name: str, available: Sequence[str]) -> None:
        self.name = name
        self.available = list(available)
        if self.available:
            listing = ", ".join(self.available)
        else:
            listing = "(none)"
        super().__init__(
            f"Unknown resource '{name}'. Available resources: {listing}",
            name=name,
            available=self.available,
        )


class MetadataError(MetaComposerError):
    """Raised when meta.yaml cannot be loaded or lacks an entry."""


class InvalidArgumentError(MetaComposerError):
    """
    Raised when a handler receives an argument it cannot act on.

    Attributes:
        argument: Name of the offending argument
        value: The value that was rejected
    """

    def __init__(self, argument: str, value: object, message: str) -> None:
        super().__init__(message, argument=argument, value=value)
        self.argument = argument
        self.value = value


class FetchError(MetaComposerError):
    """
    Raised when a remote or local document cannot be loaded.

    Attributes:
        uri: The location that failed
    """

    def __init__(self, uri: str, message: str, **context: object) -> None:
        super().__init__(f"Failed to load {uri}: {message}", uri=uri, **context)
        self.uri = uri


class ExternalToolError(MetaComposerError):
    """
    Raised when an external program a module talks to is unavailable.

    Attributes:
        tool: Name of the external program (e.g. "nvim")
    """

    def __init__(self, tool: str, message: str, **context: object) -> None:
        super().__init__(message, tool=tool, **context)
        self.tool = tool


__all__ = [
    "MetaComposerError",
    "DuplicateNameError",
    "NotFoundError",
    "MetadataError",
    "InvalidArgumentError",
    "FetchError",
    "ExternalToolError",
]
