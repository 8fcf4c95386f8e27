#!/usr/bin/env python
"""
Command line entry point for the clinic site backend.

Besides Django's own commands this exposes the cms commands
``seed_content`` (default services/FAQs/site texts) and ``sync_blog``
(pull posts from the WordPress REST API, suitable for cron).
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the clinic project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH, and is the virtual environment active?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
