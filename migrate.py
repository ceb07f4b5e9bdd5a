#!/usr/bin/env python3
"""Repository Content Migration CLI

Copies every file of a source GitHub repository into a target repository
through the REST API, in rate limited batches.

Usage:
    python migrate.py [--env-file=.env] [--batch-size=50] [--delay-ms=1000] [--log-level=INFO]

Examples:
    python migrate.py                                  # settings from .env
    python migrate.py --target-repo copy-of-project --batch-size 20
"""

from repo_content_migrator.cli import main


if __name__ == '__main__':
    main()
