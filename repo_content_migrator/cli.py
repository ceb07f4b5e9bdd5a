"""Command line entry point for the repository content migration."""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from repo_content_migrator.config import ConfigurationError, LOG_LEVELS, load_config
from repo_content_migrator.github_client import GitHubClient
from repo_content_migrator.migrator import RepositoryMigrator, ValidationError
from repo_content_migrator.rate_limiter import RateLimiter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Copy the files of one GitHub repository into another through the REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Settings are read from the environment (or a .env file); options override them.

Environment:
  GITHUB_TOKEN               token used for every API call (required)
  SOURCE_OWNER, SOURCE_REPO  repository to copy from (required)
  TARGET_OWNER, TARGET_REPO  repository to copy into (required)
  MIGRATION_BATCH_SIZE       files copied concurrently per batch (default: 50)
  MIGRATION_DELAY_MS         pause between batches (default: 1000)
  RATE_LIMIT_PER_HOUR        request budget per rolling hour (default: 5000)
  RATE_LIMIT_MIN_DELAY_MS    minimum gap between requests (default: 100)
  LOG_LEVEL                  DEBUG, INFO, WARNING or ERROR (default: INFO)

Examples:
  # Everything from .env
  python migrate.py

  # Smaller batches with a longer pause
  python migrate.py --batch-size 10 --delay-ms 5000
        """
    )

    parser.add_argument('--env-file', default='.env',
                        help='Path to a .env file to load (default: .env)')
    parser.add_argument('--source-owner', help='Source repository owner')
    parser.add_argument('--source-repo', help='Source repository name')
    parser.add_argument('--target-owner', help='Target repository owner')
    parser.add_argument('--target-repo', help='Target repository name')
    parser.add_argument('--batch-size', type=int,
                        help='Files migrated concurrently per batch (default: 50)')
    parser.add_argument('--delay-ms', type=int,
                        help='Delay between batches in milliseconds (default: 1000)')
    parser.add_argument('--max-requests-per-hour', type=int,
                        help='Hourly API request budget (default: 5000)')
    parser.add_argument('--min-delay-ms', type=int,
                        help='Minimum delay between API requests in milliseconds (default: 100)')
    parser.add_argument('--log-level', choices=LOG_LEVELS, type=str.upper,
                        help='Logging level (default: INFO)')
    return parser


def configure_logging(level: str):
    """Configure process-wide logging once, at startup."""
    logging.basicConfig(level=getattr(logging, level),
                        format='%(asctime)s - %(levelname)s - %(message)s')


async def run_migration(config):
    """Open the API session and run the migration."""
    async with GitHubClient(config.github_token) as client:
        rate_limiter = RateLimiter(config.max_requests_per_hour, config.min_delay_ms)
        migrator = RepositoryMigrator(config, client, rate_limiter)
        return await migrator.migrate_repository()


def main(argv=None):
    args = build_parser().parse_args(argv)
    load_dotenv(args.env_file)

    overrides = {
        key: value for key, value in vars(args).items()
        if key != 'env_file' and value is not None
    }

    try:
        config = load_config(overrides=overrides)
    except ConfigurationError as e:
        print(f"❌ {e}")
        if e.missing:
            print(f"Missing required environment variables: {', '.join(e.missing)}")
            print("Please check your .env file and ensure all required variables are set.")
        sys.exit(1)

    configure_logging(config.log_level)

    print("="*60)
    print("REPOSITORY CONTENT MIGRATION")
    print("="*60)
    print(f"Source:      {config.source}")
    print(f"Target:      {config.target}")
    print(f"Batches:     {config.batch_size} files, {config.delay_ms}ms apart")
    print(f"Rate limits: {config.max_requests_per_hour} requests/hour, {config.min_delay_ms}ms between requests")
    print("="*60)
    print()

    try:
        summary = asyncio.run(run_migration(config))
    except ValidationError as e:
        print(f"\n❌ VALIDATION FAILED: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n" + "="*60)
        print("⚠️  MIGRATION INTERRUPTED")
        print("Files copied so far remain in the target repository.")
        print("="*60)
        sys.exit(1)
    except Exception as e:
        print(f"\n❌ UNEXPECTED ERROR: {e}")
        sys.exit(1)

    print("\n" + "="*60)
    if summary.succeeded:
        print("✅ MIGRATION COMPLETED SUCCESSFULLY!")
    else:
        print("⚠️  MIGRATION COMPLETED WITH SOME FAILURES")
    print(f"Migrated {summary.success_count}/{summary.total_files} files "
          f"({summary.fail_count} failed) in {summary.duration:.1f}s")
    print("="*60)
    sys.exit(0)


if __name__ == '__main__':
    main()
