"""ConfigProvider Port Interface.

Contract: Retrieve typed configuration values by key. This is the only interface the
agent runtime depends on; it never touches the source readers directly.
"""

from __future__ import annotations

from typing import Any, Protocol


class ConfigProvider(Protocol):
    def get(self, key: str, expected_type: type, default: Any = None) -> Any: ...

    """
    Fetch the effective value for ``key`` coerced to ``expected_type``.

    An absent key returns ``default``; a present value that cannot be coerced
    raises TypeMismatchError.
    """
