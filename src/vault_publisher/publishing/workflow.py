"""Trigger the site-build workflow and wait for its run to finish."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from vault_publisher.config_schema import PublishingConfig
from vault_publisher.core.async_utils import run_sync, sleep_or_cancel
from vault_publisher.errors import WorkflowTimeoutError
from vault_publisher.publishing.models import RepoAttribution

if TYPE_CHECKING:
    from vault_publisher.core.client import GitHubClient

logger = logging.getLogger(__name__)

DISPATCH_PATH = "/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches"
RUNS_PATH = "/repos/{owner}/{repo}/actions/runs"
DISPATCH_REF = "main"


class BuildWaiter:
    """Dispatch ``settings.workflow_name`` and poll until its run completes.

    Args:
        client: GitHub transport.
        settings: The publishing section of the configuration.
        repo: Repository hosting the workflow.
    """

    def __init__(
        self,
        client: GitHubClient,
        settings: PublishingConfig,
        repo: RepoAttribution,
    ) -> None:
        self.client = client
        self.settings = settings
        self.repo = repo

    @property
    def run_name(self) -> str:
        """Run name GitHub reports: the workflow file name minus extension."""
        return PurePosixPath(self.settings.workflow_name).stem

    async def trigger(self) -> None:
        await run_sync(
            self.client.request,
            "POST",
            DISPATCH_PATH,
            owner=self.repo.owner,
            repo=self.repo.repo,
            workflow_id=self.settings.workflow_name,
            ref=DISPATCH_REF,
        )
        logger.info(
            "Dispatched workflow %s on %s/%s",
            self.settings.workflow_name,
            self.repo.owner,
            self.repo.repo,
        )

    async def is_completed(self) -> bool:
        """True once the latest run named :attr:`run_name` has completed."""
        response = await run_sync(
            self.client.request,
            "GET",
            RUNS_PATH,
            owner=self.repo.owner,
            repo=self.repo.repo,
        )
        data = response.data if isinstance(response.data, dict) else {}
        for run in data.get("workflow_runs") or []:
            if run.get("name") == self.run_name:
                logger.debug("Workflow run %s: %s", run.get("id"), run.get("status"))
                return run.get("status") == "completed"
        logger.debug("No run named %s yet", self.run_name)
        return False

    async def trigger_and_wait(
        self, cancel: asyncio.Event | None = None
    ) -> bool | None:
        """Dispatch the workflow and block until its run completes.

        Without ``workflow_max_wait`` the wait is unbounded.

        Args:
            cancel: Event that stops polling when set.

        Returns:
            ``None`` when no workflow is configured, ``True`` once the run
            completed, ``False`` when *cancel* was set first.

        Raises:
            WorkflowTimeoutError: If ``workflow_max_wait`` elapses first.
            GitHubApiError: If the dispatch or a poll is rejected.
        """
        if not self.settings.workflow_name:
            return None

        await self.trigger()

        interval = self.settings.workflow_poll_interval
        max_wait = self.settings.workflow_max_wait
        started = time.monotonic()
        while True:
            if await sleep_or_cancel(interval, cancel):
                logger.info("Stopped waiting for workflow %s", self.run_name)
                return False
            if await self.is_completed():
                logger.info("Workflow %s completed", self.run_name)
                return True
            if max_wait is not None and time.monotonic() - started >= max_wait:
                raise WorkflowTimeoutError(
                    f"Workflow {self.run_name} did not complete within "
                    f"{max_wait:g}s"
                )
