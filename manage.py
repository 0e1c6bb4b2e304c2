#!/usr/bin/env python
"""
Command-line entry point for the HMS inpatient backend.

Points Django at ``hms.settings`` and hands over to the management
utility, e.g. ``python manage.py migrate`` or ``python manage.py seed_ipd``.
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hms.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Django is not installed. Install the project with "
            "`pip install -e .` inside a virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
