"""Core / service layer — pure models, parsers and control-flow primitives.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O (the poller only waits on an event).
* No imports from ``cli`` or ``infra``.
"""

from photon_cli.core.models import Entity, Page, Task, TaskState
from photon_cli.core.pagination import collect_all, iter_items, iter_pages
from photon_cli.core.poller import PollPolicy, TaskPoller
from photon_cli.core.protocols import PageFetcher, TaskFetcher

__all__: list[str] = [
    "Entity",
    "Page",
    "PageFetcher",
    "PollPolicy",
    "Task",
    "TaskFetcher",
    "TaskPoller",
    "TaskState",
    "collect_all",
    "iter_items",
    "iter_pages",
]
