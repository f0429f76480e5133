"""
Typing names shared across the client.

Every module imports its annotations from here so the one
version-dependent import (``Self``) is resolved in a single place.
"""

import sys
from typing import (
    Any,
    Dict,
    List,
    Tuple,
    Union,
    Mapping,
    Optional,
    Callable,
    Awaitable,
    NamedTuple,
    TYPE_CHECKING,
)

# PEP 673: typing.Self exists from 3.11; typing_extensions backports it.
if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

__all__ = [
    "Any",
    "Self",
    "Dict",
    "List",
    "Tuple",
    "Union",
    "Mapping",
    "Callable",
    "Optional",
    "Awaitable",
    "NamedTuple",
    "TYPE_CHECKING",
]
