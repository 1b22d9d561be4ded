"""Per-invocation state shared by every command handler.

A :class:`CommandContext` is built once by :func:`photon_cli.cli.app.main`
and handed to the selected handler.  It owns:

* the parsed arguments and the positional-arity check,
* the lazily constructed :class:`~photon_cli.infra.PhotonClient`,
* the poll policy and the cancellation event used while waiting,
* the output formatter and the prompt/confirmation pre-pass helpers.

Nothing here is stored globally; tests construct a context directly with
a mocked client factory.
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager, nullcontext
from typing import Any, TypeVar

from photon_cli.cli import prompts
from photon_cli.cli.console import console, out, rich_available
from photon_cli.cli.output import Formatter, OutputFormat
from photon_cli.core.models import Page, Task
from photon_cli.core.pagination import collect_all
from photon_cli.core.poller import PollPolicy, TaskPoller
from photon_cli.core.protocols import PageFetcher
from photon_cli.exceptions import ArgumentCountError, ConfigurationError, ValidationError
from photon_cli.infra.config_store import CliConfig, ConfigStore, NamedRef
from photon_cli.infra.photon_api import PhotonClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[CliConfig], PhotonClient]


class CommandContext:
    """Everything a handler needs to run one command."""

    def __init__(
        self,
        args: argparse.Namespace,
        *,
        config_store: ConfigStore,
        client_factory: ClientFactory,
        formatter: Formatter,
        poll_policy: PollPolicy,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.args: argparse.Namespace = args
        self.config_store: ConfigStore = config_store
        self.formatter: Formatter = formatter
        self.poll_policy: PollPolicy = poll_policy
        self.cancel_event: threading.Event = cancel_event or threading.Event()
        self._client_factory: ClientFactory = client_factory
        self._client: PhotonClient | None = None
        self._config: CliConfig | None = None

    # ------------------------------------------------------------------
    # Arguments and mode
    # ------------------------------------------------------------------

    @property
    def non_interactive(self) -> bool:
        return bool(getattr(self.args, "non_interactive", False))

    @property
    def positional(self) -> list[str]:
        return list(getattr(self.args, "args", None) or [])

    def check_arg_count(self, expected: int) -> list[str]:
        """Return the positional args, or raise if there are not exactly *expected*."""
        values = self.positional
        if len(values) != expected:
            raise ArgumentCountError(expected, len(values))
        return values

    def optional_arg(self) -> str:
        """Return the single optional positional, or ``""`` when omitted."""
        values = self.positional
        if len(values) > 1:
            raise ArgumentCountError(1, len(values))
        return values[0] if values else ""

    @property
    def needs_formatting(self) -> bool:
        """True when a finished task should be followed by a ``get`` of its entity."""
        return self.formatter.structured

    # ------------------------------------------------------------------
    # Configuration and client
    # ------------------------------------------------------------------

    @property
    def config(self) -> CliConfig:
        if self._config is None:
            self._config = self.config_store.load()
        return self._config

    def save_config(self, config: CliConfig) -> None:
        self.config_store.save(config)
        self._config = config

    @property
    def client(self) -> PhotonClient:
        """Build the API client on first use from the saved target."""
        if self._client is None:
            config = self.config
            if not config.cloud_target:
                raise ConfigurationError(
                    "No target is set.",
                    hint="Run 'photon target set <endpoint>' first.",
                )
            logger.debug("building client for %s", config.cloud_target)
            self._client = self._client_factory(config)
        return self._client

    # ------------------------------------------------------------------
    # Prompt pre-pass
    # ------------------------------------------------------------------

    def ask(self, message: str, current: str = "", *, secret: bool = False) -> str:
        """Fill *current* from a prompt unless it is set or prompts are disabled."""
        if current or self.non_interactive:
            return current
        return prompts.ask_for_input(message, current, secret=secret)

    @staticmethod
    def require(value: str, what: str) -> str:
        if not value:
            raise ValidationError(f"Please provide {what}.")
        return value

    def confirmed(self, message: str = "Are you sure?") -> bool:
        """Non-interactive mode grants every confirmation."""
        if self.non_interactive:
            return True
        return prompts.confirm(message)

    # ------------------------------------------------------------------
    # Tenant / project defaults
    # ------------------------------------------------------------------

    def resolve_tenant(self, name: str = "") -> NamedRef:
        """Look up *name*, or fall back to the tenant saved in the config."""
        if name:
            page = self.client.tenants.list(name=name)
            for tenant in self.collect(page, self.client.tenants.pages):
                if tenant.name == name:
                    return NamedRef(name=tenant.name, id=tenant.id)
            raise ValidationError(f"Tenant '{name}' not found.")
        if self.config.tenant is None:
            raise ValidationError(
                "No tenant given and no default tenant is set.",
                hint="Pass --tenant or run 'photon tenant set <name>'.",
            )
        return self.config.tenant

    def resolve_project(self, tenant_name: str = "", project_name: str = "") -> NamedRef:
        """Look up *project_name* under a tenant, or use the saved project."""
        if project_name:
            return self.find_project(self.resolve_tenant(tenant_name), project_name)
        if self.config.project is None:
            raise ValidationError(
                "No project given and no default project is set.",
                hint="Pass --project or run 'photon project set <name>'.",
            )
        return self.config.project

    def find_project(self, tenant: NamedRef, name: str) -> NamedRef:
        page = self.client.tenants.list_projects(tenant.id, name=name)
        for project in self.collect(page, self.client.projects.pages):
            if project.name == name:
                return NamedRef(name=project.name, id=project.id)
        raise ValidationError(f"Project '{name}' not found in tenant '{tenant.name}'.")

    # ------------------------------------------------------------------
    # Walker and poller
    # ------------------------------------------------------------------

    def collect(self, first_page: Page[T], fetcher: PageFetcher[T]) -> list[T]:
        return collect_all(first_page, fetcher)

    def wait_for_task(self, task: Task) -> str:
        """Poll *task* to completion, report it, and return its entity id."""
        return self.wait_for_task_id(task.id)

    def wait_for_task_id(self, task_id: str) -> str:
        finished = self.poll(task_id, show_progress=True)

        entity_id = finished.entity.id if finished.entity is not None else ""
        if self.formatter.format is OutputFormat.SCRIPT:
            if entity_id:
                out.write(entity_id + "\n")
        elif self.formatter.format is OutputFormat.TABLE:
            kind = finished.entity.kind if finished.entity is not None else ""
            console.print(
                f"[green]{finished.operation} completed for '{kind}' entity {entity_id}[/green]",
            )
        return entity_id

    def poll(self, task_id: str, *, show_progress: bool = False) -> Task:
        """Poll *task_id* to completion without reporting; return the final task."""
        with self._progress(show_progress) as progress:
            policy = self.poll_policy
            if progress is not None:
                policy = PollPolicy(interval=policy.interval, timeout=policy.timeout, on_progress=progress)
            poller = TaskPoller(self.client.tasks, policy, cancel_event=self.cancel_event)
            with self._cancel_on_interrupt():
                return poller.wait(task_id)

    def wait_and_show(self, task: Task, fetch: Callable[[str], Any]) -> str:
        """Wait for *task*; in structured mode also print the resulting entity."""
        entity_id = self.wait_for_task(task)
        if self.needs_formatting and entity_id:
            self.formatter.document(fetch(entity_id))
        return entity_id

    def _progress(self, enabled: bool) -> Any:
        if not enabled or self.formatter.format is not OutputFormat.TABLE or not rich_available():
            return nullcontext(None)
        from photon_cli.cli.progress import RichTaskProgress

        return RichTaskProgress()

    @contextmanager
    def _cancel_on_interrupt(self) -> Iterator[None]:
        """Route SIGINT to the cancellation event while a task is polled."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def _handler(_signum: int, _frame: object) -> None:
            self.cancel_event.set()

        previous = signal.signal(signal.SIGINT, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
