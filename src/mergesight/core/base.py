"""Base classes for configuration and tracked runtime models.

This module contains the foundational classes used throughout
mergesight:
- Closeable Protocol for resource cleanup
- BaseCloseable for automatic cleanup cascade
- BaseConfig for configuration models

These live in a separate module so that config.py and log.py can
both import them without a circular dependency.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Model that closes its Closeable children on close().

    Any model inheriting from BaseCloseable:
    - is a context manager
    - walks its fields on close() and closes every child that
      implements Closeable
    - keeps closing the remaining children if one of them fails

    The cascade runs State -> Config -> Logger -> Sink.
    """

    def close(self):
        """Close all closeable child objects.

        Errors from individual children are reported on stderr and
        do not stop the walk.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    print(
                        f"Warning: Error closing {field_name}: {e}",
                        file=sys.stderr,
                    )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Base class for all configuration sections.

    Marks a model as configuration (loaded from YAML/env/CLI)
    rather than a scanned or detected record.
    """
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig"]
