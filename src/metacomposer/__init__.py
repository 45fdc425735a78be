"""
meta-composer - uniform list/show access to developer resources.

A CLI that puts API specifications, editor state and project dependency
guides behind one command surface so that agents and humans can ask
"what exists" and "show me details" without per-resource tooling.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
