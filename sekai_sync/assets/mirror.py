"""
Sekai Sync - Incremental Asset Mirror

Copies remote images into the local hosting tree once.

Pipeline:
1. Pre-filter: a job whose destination file already exists is counted as
   skipped and never dispatched. Re-running over a populated tree only
   fetches newly discovered assets.
2. A fixed pool of MAX_CONCURRENCY workers drains a job queue. Each worker
   tries a job's candidate URLs strictly in order and keeps the first 2xx
   response with a non-empty body.
3. The payload is written to "<dest>.tmp" and renamed onto the destination.
   The rename is the commit point: a destination is either absent or
   complete.
4. Workers push one JobOutcome per job onto a result queue; counts are
   aggregated once after every worker has finished.

Per-job failures (all candidates missed, write error, any unexpected error
inside a job) are logged and counted, never raised. The existence check is not guarded against another
process writing the same tree concurrently.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel

from sekai_sync.assets.downloader import AssetDownloader
from sekai_sync.assets.jobs import AssetJob, build_asset_jobs
from sekai_sync.config import Settings, settings
from sekai_sync.pipeline.master import Card, Event, Gacha

logger = structlog.get_logger(__name__)

TEMP_SUFFIX = ".tmp"


class JobStatus(str, Enum):
    SAVED = "saved"
    MISSED = "missed"
    WRITE_FAILED = "write_failed"


class JobOutcome(BaseModel):
    """Result of one dispatched job."""
    dest_rel: str
    status: JobStatus
    source_url: str | None = None
    last_status_code: int = 0


class MirrorReport(BaseModel):
    """Counts for one mirror run. total is the number of jobs built."""
    downloaded: int = 0
    skipped: int = 0
    missed: int = 0
    write_failed: int = 0
    total: int = 0


def file_exists(path: Path) -> bool:
    return path.is_file()


def write_file_atomic(path: Path, data: bytes) -> None:
    """
    Write data beside path, then rename it into place.

    The temporary file is removed if writing or renaming fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + TEMP_SUFFIX)
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


class AssetMirror:
    """
    Usage:
        mirror = AssetMirror(root="image-hosting", max_concurrency=6)
        report = await mirror.run(jobs)
    """

    def __init__(
        self,
        root: str | os.PathLike[str] | None = None,
        max_concurrency: int | None = None,
        downloader: AssetDownloader | None = None,
    ):
        root = settings.IMAGE_REPO_DIR if root is None else root
        if not str(root):
            raise ValueError("IMAGE_REPO_DIR is empty")
        self.root = Path(root)
        concurrency = settings.MAX_CONCURRENCY if max_concurrency is None else max_concurrency
        self.max_concurrency = max(1, concurrency)
        self._downloader = downloader

    def destination(self, job: AssetJob) -> Path:
        return self.root / job.dest_rel

    async def _fetch_first(self, job: AssetJob, downloader: AssetDownloader) -> tuple[bytes | None, str | None, int]:
        """Try candidates in order. Returns (content, source_url, last_status_code)."""
        last_status = 0
        for url in job.urls:
            result = await downloader.get(url)
            last_status = result.status_code
            if result.ok:
                return result.content, url, last_status
        return None, None, last_status

    async def _process(self, job: AssetJob, downloader: AssetDownloader) -> JobOutcome:
        content, source_url, last_status = await self._fetch_first(job, downloader)

        if content is None:
            logger.warning("asset_miss", path=job.dest_rel, last_status=last_status)
            return JobOutcome(
                dest_rel=job.dest_rel,
                status=JobStatus.MISSED,
                last_status_code=last_status,
            )

        try:
            await asyncio.to_thread(write_file_atomic, self.destination(job), content)
        except OSError as e:
            logger.error("asset_write_failed", path=job.dest_rel, error=str(e))
            return JobOutcome(
                dest_rel=job.dest_rel,
                status=JobStatus.WRITE_FAILED,
                source_url=source_url,
                last_status_code=last_status,
            )

        logger.info("asset_saved", path=job.dest_rel, source_url=source_url, size=len(content))
        return JobOutcome(
            dest_rel=job.dest_rel,
            status=JobStatus.SAVED,
            source_url=source_url,
            last_status_code=last_status,
        )

    async def _worker(
        self,
        pending: asyncio.Queue[AssetJob],
        outcomes: asyncio.Queue[JobOutcome],
        downloader: AssetDownloader,
    ) -> None:
        # The queue is fully loaded before workers start, so empty means done.
        while True:
            try:
                job = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                outcome = await self._process(job, downloader)
            except Exception as e:
                logger.error(
                    "asset_job_failed",
                    path=job.dest_rel,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                outcome = JobOutcome(dest_rel=job.dest_rel, status=JobStatus.MISSED)
            outcomes.put_nowait(outcome)

    async def _run_pool(self, pending: asyncio.Queue[AssetJob], downloader: AssetDownloader) -> list[JobOutcome]:
        outcomes: asyncio.Queue[JobOutcome] = asyncio.Queue()
        workers = [
            asyncio.create_task(self._worker(pending, outcomes, downloader))
            for _ in range(min(self.max_concurrency, pending.qsize()))
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        collected: list[JobOutcome] = []
        while not outcomes.empty():
            collected.append(outcomes.get_nowait())
        return collected

    async def run(self, jobs: Sequence[AssetJob]) -> MirrorReport:
        """
        Mirror every job whose destination is missing.

        Args:
            jobs: At most one job per destination.

        Returns:
            MirrorReport with downloaded / skipped / missed / write_failed / total.
        """
        report = MirrorReport(total=len(jobs))
        pending: asyncio.Queue[AssetJob] = asyncio.Queue()
        for job in jobs:
            if file_exists(self.destination(job)):
                report.skipped += 1
                continue
            pending.put_nowait(job)

        logger.info(
            "assets_dispatch",
            root=str(self.root),
            total=report.total,
            skipped=report.skipped,
            dispatched=pending.qsize(),
            workers=min(self.max_concurrency, pending.qsize()),
        )

        outcomes: list[JobOutcome] = []
        if not pending.empty():
            if self._downloader is not None:
                outcomes = await self._run_pool(pending, self._downloader)
            else:
                async with AssetDownloader() as downloader:
                    outcomes = await self._run_pool(pending, downloader)

        for outcome in outcomes:
            if outcome.status is JobStatus.SAVED:
                report.downloaded += 1
            elif outcome.status is JobStatus.MISSED:
                report.missed += 1
            else:
                report.write_failed += 1

        logger.info(
            "assets_summary",
            saved=report.downloaded,
            skipped=report.skipped,
            missed=report.missed,
            write_failed=report.write_failed,
            total=report.total,
        )
        return report


async def sync_assets(
    cards: Sequence[Card],
    events: Sequence[Event],
    gachas: Sequence[Gacha],
    root: str | os.PathLike[str] | None = None,
    max_concurrency: int | None = None,
    config: Settings | None = None,
) -> MirrorReport:
    """
    Build the job list for this run's collections and mirror it.

    Asset bases, HTTP timeout and user agent come from config (defaults to
    the module singleton); root and max_concurrency override its
    IMAGE_REPO_DIR and MAX_CONCURRENCY.
    """
    cfg = config or settings
    root = cfg.IMAGE_REPO_DIR if root is None else root
    max_concurrency = cfg.MAX_CONCURRENCY if max_concurrency is None else max_concurrency

    jobs = build_asset_jobs(cards, events, gachas, config=cfg)
    async with AssetDownloader(timeout=cfg.HTTP_TIMEOUT_SECONDS, user_agent=cfg.USER_AGENT) as downloader:
        mirror = AssetMirror(root=root, max_concurrency=max_concurrency, downloader=downloader)
        return await mirror.run(jobs)
