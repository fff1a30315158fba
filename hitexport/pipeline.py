"""HitExport pipeline — stream all hits of a tenant into a published CSV.gz.

State machine per run:

  IDLE → FETCHING → ENCODING → (loop) → FINALIZING → PUBLISHED
  FETCHING | ENCODING | FINALIZING → ABORTED   (on any error)

Each run owns one ExportJob. Nothing is visible at the artifact path until the
whole stream has been encoded, the gzip trailer written, the temp file synced
and closed, and the temp file renamed into place. On abort the temp file is
removed and no notification is sent.

Usage:
    from config.settings import ExportConfig
    from hitexport.models import Tenant
    from hitexport.pipeline import export
    from hitexport.sources import SQLiteHitSource

    with SQLiteHitSource("hits.sqlite3") as source:
        outcome = export(Tenant(id=1, code="example"), 0, source)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import IO, Optional

from config.defaults import START_CURSOR
from config.settings import ExportConfig
from hitexport.errors import (
    DigestError,
    EncodeError,
    ExportCancelled,
    ExportError,
    FetchError,
    FinalizeError,
    NotifyError,
    PublishError,
)
from hitexport.io.persistence import (
    create_temp_file,
    file_size,
    human_size,
    remove_quietly,
    sync_file,
)
from hitexport.io.sink import RecordSink
from hitexport.models.export import (
    ExportFailure,
    ExportJob,
    ExportOutcome,
    ExportState,
    ExportSuccess,
)
from hitexport.models.hits import HitPage, Tenant
from hitexport.notifiers.base import BaseNotifier
from hitexport.publisher import ArtifactPublisher
from hitexport.sources.base import BaseHitSource
from hitexport.utils.logging_utils import get_job_logger


def _check_page(page: HitPage, cursor: int) -> None:
    """Verify a page honours the fetch contract for a request at ``cursor``.

    Raises:
        FetchError: If ids are not strictly ascending past the cursor, or the
            page cursor is not the highest id in the page.
    """
    if not page.hits:
        if page.cursor != cursor:
            raise FetchError(f"empty page moved cursor from {cursor} to {page.cursor}")
        return
    last = cursor
    for hit in page.hits:
        if hit.id <= last:
            raise FetchError(f"hit id {hit.id} out of order after {last}")
        last = hit.id
    if page.cursor != last:
        raise FetchError(f"page cursor {page.cursor} does not match highest id {last}")


class ExportPipeline:
    """Drive the fetch → encode → finalize → publish → notify sequence.

    The pipeline holds no per-run state, so one instance can serve many
    tenants, including concurrently from different threads. Two concurrent
    runs for the same tenant are not serialized here; the later rename wins.

    Args:
        source: Paginated hit source.
        notifier: Told about each successful export; failures are logged only.
        config: Page size, pacing delay, export directory, compression level.
        publisher: Artifact publisher (default: one for config.export_dir).
    """

    def __init__(
        self,
        source: BaseHitSource,
        notifier: Optional[BaseNotifier] = None,
        config: Optional[ExportConfig] = None,
        publisher: Optional[ArtifactPublisher] = None,
    ) -> None:
        self.source = source
        self.notifier = notifier
        self.config = config or ExportConfig()
        self.publisher = publisher or ArtifactPublisher(
            self.config.export_dir, self.config.filename_template
        )

    def run(
        self,
        tenant: Tenant,
        resume_cursor: int = START_CURSOR,
        destination: Optional[IO[bytes]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ExportOutcome:
        """Export every hit after ``resume_cursor`` for ``tenant``.

        Args:
            tenant: Tenant the artifact is published for.
            resume_cursor: Export hits with an id greater than this value.
            destination: Open, writable, named binary file to use as the temp
                artifact. The pipeline takes ownership and closes or removes it.
                A private temp file in the export directory is created if omitted.
            cancel: Checked before each page fetch; when set the run aborts.

        Returns:
            ExportSuccess, or ExportFailure carrying the ExportError cause.
        """
        job = ExportJob(
            tenant=tenant,
            temp_path=getattr(destination, "name", ""),
            handle=destination,
            cursor=resume_cursor,
        )
        log = get_job_logger(__name__, job)

        try:
            final_path = self.publisher.path_for(tenant)
        except ValueError as exc:
            return self._reject(
                job, PublishError(f"no artifact path for tenant code {tenant.code!r}", exc), log
            )

        if destination is None:
            try:
                destination = create_temp_file(final_path.parent, f"export-{tenant.code}-")
            except OSError as exc:
                return self._reject(
                    job, EncodeError(f"cannot create temp file in {final_path.parent}", exc), log
                )
            job.temp_path = destination.name
            job.handle = destination

        log.info("export started (page size %d)", self.config.page_size)

        sink = RecordSink(destination, self.config.compression_level)
        succeeded = False
        try:
            sink.open()
            self._stream(job, sink, cancel, log)
            size_bytes = self._finalize(job, sink, log)
            path, digest = self.publisher.publish(job.temp_path, tenant)
            job.state = ExportState.PUBLISHED
            succeeded = True
        except DigestError as exc:
            job.state = ExportState.ABORTED
            log.error("artifact published to %s but not verified: %s", final_path, exc)
            return ExportFailure(
                tenant=tenant,
                cause=exc,
                rows=job.rows,
                cursor=job.cursor,
                published=True,
                path=str(final_path),
            )
        except ExportError as exc:
            job.state = ExportState.ABORTED
            log.error("export aborted during %s: %s", exc.stage, exc)
            return ExportFailure(tenant=tenant, cause=exc, rows=job.rows, cursor=job.cursor)
        finally:
            if not succeeded:
                self._cleanup(job, sink, log)

        outcome = ExportSuccess(
            tenant=tenant,
            path=str(path),
            rows=job.rows,
            size=human_size(size_bytes) if size_bytes is not None else "0",
            size_bytes=size_bytes or 0,
            digest=digest,
            cursor=job.cursor,
            elapsed_seconds=job.elapsed_seconds,
        )
        log.info(
            "export finished: %d pages, %s MiB in %.1fs",
            job.pages,
            outcome.size,
            outcome.elapsed_seconds,
        )
        self._notify(tenant, outcome, log)
        return outcome

    # ── Transitions ───────────────────────────────────────────────────────────

    def _fetch(self, job: ExportJob, cancel: Optional[threading.Event]) -> HitPage:
        if cancel is not None and cancel.is_set():
            raise ExportCancelled(f"export cancelled at cursor {job.cursor}")

        job.state = ExportState.FETCHING
        try:
            page = self.source.fetch_page(job.cursor, self.config.page_size)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"{self.source.name} failed at cursor {job.cursor}", exc) from exc
        job.pages += 1
        _check_page(page, job.cursor)
        return page

    def _stream(
        self,
        job: ExportJob,
        sink: RecordSink,
        cancel: Optional[threading.Event],
        log: logging.LoggerAdapter,
    ) -> None:
        while True:
            page = self._fetch(job, cancel)
            if page.exhausted:
                log.debug("source exhausted after %d pages", job.pages)
                return

            job.state = ExportState.ENCODING
            for hit in page.hits:
                sink.write_record(hit)
                job.rows += 1
            sink.flush()
            job.cursor = page.cursor
            log.debug("page %d encoded (%d hits)", job.pages, len(page))

            self._pace(cancel)

    def _pace(self, cancel: Optional[threading.Event]) -> None:
        """Small amount of breathing space for the source between pages."""
        delay = self.config.pacing_delay
        if delay <= 0:
            return
        if cancel is not None:
            cancel.wait(delay)
        else:
            time.sleep(delay)

    def _finalize(
        self, job: ExportJob, sink: RecordSink, log: logging.LoggerAdapter
    ) -> Optional[int]:
        """Write the gzip trailer, sync and close the temp file; return its size or None."""
        job.state = ExportState.FINALIZING
        sink.finalize()
        handle = job.handle
        try:
            sync_file(handle)
        except OSError as exc:
            raise FinalizeError(f"syncing {job.temp_path} failed", exc) from exc

        size_bytes = file_size(handle)
        try:
            handle.close()
        except OSError as exc:
            raise FinalizeError(f"closing {job.temp_path} failed", exc) from exc
        if size_bytes is None:
            log.warning("size of %s unknown; reporting 0", job.temp_path)
        return size_bytes

    def _reject(
        self, job: ExportJob, cause: ExportError, log: logging.LoggerAdapter
    ) -> ExportFailure:
        """Abort a run that failed before streaming started."""
        job.state = ExportState.ABORTED
        log.error("export aborted during %s: %s", cause.stage, cause)
        self._cleanup(job, None, log)
        return ExportFailure(tenant=job.tenant, cause=cause, cursor=job.cursor)

    def _cleanup(
        self, job: ExportJob, sink: Optional[RecordSink], log: logging.LoggerAdapter
    ) -> None:
        """Release the sink and temp file after an aborted run. Never raises."""
        if sink is not None:
            sink.abort()
        handle = job.handle
        if handle is not None and not handle.closed:
            try:
                handle.close()
            except OSError as exc:
                log.debug("ignoring error closing %s: %s", job.temp_path, exc)
        if job.temp_path and remove_quietly(job.temp_path):
            log.debug("removed temp file %s", job.temp_path)

    def _notify(self, tenant: Tenant, outcome: ExportSuccess, log: logging.LoggerAdapter) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(tenant, outcome)
        except NotifyError as exc:
            log.error("notification via %s failed: %s", self.notifier.name, exc)
        except Exception as exc:
            log.exception("notifier %s raised unexpectedly: %s", self.notifier.name, exc)


def export(
    tenant: Tenant,
    resume_cursor: int,
    source: BaseHitSource,
    notifier: Optional[BaseNotifier] = None,
    config: Optional[ExportConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> ExportOutcome:
    """Run a single export for ``tenant`` and return its terminal outcome.

    Args:
        tenant: Tenant to export.
        resume_cursor: Export hits with an id greater than this value.
        source: Paginated hit source.
        notifier: Optional completion notifier.
        config: Optional ExportConfig (defaults from environment).
        cancel: Optional cancellation event.

    Returns:
        ExportSuccess or ExportFailure.
    """
    pipeline = ExportPipeline(source, notifier=notifier, config=config)
    return pipeline.run(tenant, resume_cursor, cancel=cancel)
