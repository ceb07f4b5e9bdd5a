"""Main migration orchestrator that copies repository contents batch by batch."""

import asyncio
import base64
import binascii
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from repo_content_migrator.config import MigrationConfig
from repo_content_migrator.github_client import GitHubClient, GitHubAPIError
from repo_content_migrator.models import (
    BatchProgress,
    FileDescriptor,
    MigrationResult,
    MigrationSummary,
    batch_files,
)
from repo_content_migrator.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when the token or either repository cannot be accessed."""
    pass


def reencode_content(content: str) -> str:
    """Decode a base64 payload and encode it again without line breaks."""
    raw = base64.b64decode("".join(content.split()), validate=True)
    return base64.b64encode(raw).decode("ascii")


class RepositoryMigrator:
    """Copies every file of the source repository into the target repository."""

    def __init__(self, config: MigrationConfig, client: GitHubClient,
                 rate_limiter: Optional[RateLimiter] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """Initialize the migrator."""
        self.config = config
        self.client = client
        self.rate_limiter = rate_limiter or RateLimiter(
            config.max_requests_per_hour, config.min_delay_ms
        )
        self._sleep = sleep

        logger.info(f"Initialized migrator: {config.source} -> {config.target} "
                    f"(batch size: {config.batch_size}, delay: {config.delay_ms}ms)")

    async def validate_access(self):
        """Check the token and that both repositories are reachable."""
        logger.info("Validating GitHub API access")
        checks = [
            ("authenticate token", self.client.get_authenticated_user),
            (f"access source repository {self.config.source}",
             lambda: self.client.get_repository(self.config.source_owner, self.config.source_repo)),
            (f"access target repository {self.config.target}",
             lambda: self.client.get_repository(self.config.target_owner, self.config.target_repo)),
        ]

        for description, check in checks:
            await self.rate_limiter.wait_for_next_request()
            try:
                await check()
            except GitHubAPIError as e:
                logger.error(f"Configuration validation failed: could not {description}: {e}")
                raise ValidationError(f"Could not {description}: {e}") from e

        logger.info("Configuration validated successfully")

    async def list_source_files(self) -> List[FileDescriptor]:
        """Walk the source tree and return every file in it."""
        files: List[FileDescriptor] = []
        seen_paths = set()
        visited_dirs = set()
        pending = [""]

        while pending:
            path = pending.pop()
            if path in visited_dirs:
                continue
            visited_dirs.add(path)

            await self.rate_limiter.wait_for_next_request()
            try:
                entries = await self.client.list_contents(
                    self.config.source_owner, self.config.source_repo, path
                )
            except GitHubAPIError as e:
                logger.error(f"Error getting files from '{path or '/'}': {e}")
                continue

            subdirs = []
            for entry in entries:
                item = FileDescriptor.from_api(entry)
                if item.is_file:
                    if item.path not in seen_paths:
                        seen_paths.add(item.path)
                        files.append(item)
                elif item.is_dir:
                    subdirs.append(item.path)
                else:
                    logger.debug(f"Skipping {item.path} (type: {item.type})")

            # Reversed so directories are walked in listing order
            pending.extend(reversed(subdirs))

        return files

    async def migrate_file(self, file: FileDescriptor) -> MigrationResult:
        """Copy a single file from the source to the target repository."""
        try:
            await self.rate_limiter.wait_for_next_request()
            content = await self.client.get_file_content(
                self.config.source_owner, self.config.source_repo, file.path
            )
            if content is None:
                if not file.sha:
                    raise GitHubAPIError(f"No content returned for {file.path}")
                await self.rate_limiter.wait_for_next_request()
                content = await self.client.get_blob(
                    self.config.source_owner, self.config.source_repo, file.sha
                )
            payload = reencode_content(content)

            await self.rate_limiter.wait_for_next_request()
            existing_sha = await self.client.get_file_sha(
                self.config.target_owner, self.config.target_repo, file.path
            )

            await self.rate_limiter.wait_for_next_request()
            await self.client.create_or_update_file(
                self.config.target_owner,
                self.config.target_repo,
                file.path,
                f"Migrate: {file.path}",
                payload,
                sha=existing_sha
            )

            logger.info(f"Migrated: {file.path}")
            return MigrationResult(path=file.path, success=True)

        except (GitHubAPIError, binascii.Error, ValueError) as e:
            logger.error(f"Failed to migrate {file.path}: {e}")
            return MigrationResult(path=file.path, success=False, error=str(e))

    async def migrate_batch(self, batch: List[FileDescriptor]) -> List[MigrationResult]:
        """Copy all files of a batch concurrently and collect every outcome."""
        outcomes = await asyncio.gather(
            *(self.migrate_file(file) for file in batch),
            return_exceptions=True
        )

        results = []
        for file, outcome in zip(batch, outcomes):
            if isinstance(outcome, MigrationResult):
                results.append(outcome)
            else:
                logger.error(f"Failed to migrate {file.path}: {outcome!r}")
                results.append(MigrationResult(path=file.path, success=False, error=str(outcome)))
        return results

    async def migrate_repository(self) -> MigrationSummary:
        """Validate access, then copy the whole source tree to the target."""
        logger.info(f"Starting repository migration: {self.config.source} -> {self.config.target}")
        started = time.monotonic()
        start_time = datetime.now()

        await self.validate_access()

        all_files = await self.list_source_files()
        logger.info(f"Found {len(all_files)} files to migrate")

        batches = batch_files(all_files, self.config.batch_size)
        results: List[MigrationResult] = []
        success_count = 0
        fail_count = 0

        for index, batch in enumerate(batches, 1):
            logger.info(f"Processing batch {index}/{len(batches)} ({len(batch)} files)")

            batch_results = await self.migrate_batch(batch)
            results.extend(batch_results)
            batch_successes = sum(1 for result in batch_results if result.success)
            success_count += batch_successes
            fail_count += len(batch_results) - batch_successes

            progress = BatchProgress.snapshot(
                index, len(batches), len(results), len(all_files), start_time, datetime.now()
            )
            self._log_progress(progress)

            if index < len(batches):
                await self._sleep(self.config.delay_ms / 1000)

        summary = MigrationSummary(
            total_files=len(all_files),
            success_count=success_count,
            fail_count=fail_count,
            duration=time.monotonic() - started,
            results=results
        )
        self._log_summary(summary)
        return summary

    def _log_progress(self, progress: BatchProgress):
        eta = ""
        if progress.estimated_completion and progress.processed_files < progress.total_files:
            eta = f", estimated completion {progress.estimated_completion:%H:%M:%S}"
        stats = self.rate_limiter.get_status()
        logger.info(f"Progress: batch {progress.current_batch}/{progress.total_batches}, "
                    f"{progress.processed_files}/{progress.total_files} files "
                    f"({progress.percent_complete:.0f}%){eta}. "
                    f"Rate limit: {stats['request_count']}/{stats['max_requests']} requests this hour")

    def _log_summary(self, summary: MigrationSummary):
        logger.info("Migration Summary:")
        logger.info(f"Successfully migrated: {summary.success_count} files")
        logger.info(f"Failed to migrate: {summary.fail_count} files")
        logger.info(f"Total files: {summary.total_files} ({summary.duration:.1f}s)")

        if summary.succeeded:
            logger.info("Migration completed successfully!")
        else:
            logger.warning("Migration completed with some failures")
            for path in summary.failed_paths:
                logger.warning(f"  failed: {path}")
