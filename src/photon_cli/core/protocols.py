"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, following the dependency inversion principle.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

from photon_cli.core.models import Page, Task

T_co = TypeVar("T_co", covariant=True)


class TaskFetcher(Protocol):
    """Contract for reading the current snapshot of a task.

    Any object that implements :meth:`get` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def get(self, task_id: str) -> Task:
        """Fetch the task identified by *task_id*.

        Raises
        ------
        TransportError
            On network failures or non-2xx responses.
        ResourceNotFoundError
            When the server does not know *task_id*.
        """
        ...  # pragma: no cover


class PageFetcher(Protocol[T_co]):
    """Contract for following a ``nextPageLink`` continuation."""

    def get_page(self, link: str) -> Page[T_co]:
        """Fetch the page addressed by *link*.

        Raises
        ------
        TransportError
            On network failures or non-2xx responses.
        """
        ...  # pragma: no cover
