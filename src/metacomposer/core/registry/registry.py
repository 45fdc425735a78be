"""
Resource registry.

Maps resource names to resource modules. The registry is populated once at
startup by the composition root and read-only afterwards, so no locking is
needed.
"""

from __future__ import annotations

import logging

from metacomposer.core.exceptions import DuplicateNameError, NotFoundError
from metacomposer.core.registry.module import ResourceModule

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """
    Insertion-ordered mapping from resource name to module.

    Example:
        >>> registry = ResourceRegistry()
        >>> registry.register(openapi_module)
        >>> registry.list()
        ['openapi']
        >>> registry.get("missing") is None
        True
    """

    def __init__(self) -> None:
        self._modules: dict[str, ResourceModule] = {}

    def register(self, module: ResourceModule) -> None:
        """
        Register a resource module under its name.

        Args:
            module: Module to register

        Raises:
            ValueError: If the module name is empty
            DuplicateNameError: If a module with the same name is registered
        """
        name = module.name
        if not name:
            raise ValueError("Resource module name must be a non-empty string")
        if name in self._modules:
            raise DuplicateNameError(name)

        self._modules[name] = module
        logger.debug("Registered resource module %s", name)

    def get(self, name: str) -> ResourceModule | None:
        """Return the module registered under name, or None."""
        return self._modules.get(name)

    def require(self, name: str) -> ResourceModule:
        """
        Return the module registered under name.

        Raises:
            NotFoundError: If no module has that name; the error lists
                every registered name
        """
        module = self._modules.get(name)
        if module is None:
            raise NotFoundError(name, self.list())
        return module

    def has(self, name: str) -> bool:
        """Check whether a module is registered under name."""
        return name in self._modules

    def list(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._modules)

    def modules(self) -> list[ResourceModule]:
        """Registered modules, in registration order."""
        return list(self._modules.values())

    def clear(self) -> None:
        """Remove every module. Only meant for test isolation."""
        self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules


# Process-wide registry used by the CLI entry point
registry = ResourceRegistry()
