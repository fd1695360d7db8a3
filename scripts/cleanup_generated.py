"""Remove generated documents older than a given number of days.

Usage:
    python -m scripts.cleanup_generated [days]
"""

import sys

from docgen.core.logging_config import setup_logging
from docgen.services.generator import DocumentGenerator


def main(argv: list[str]) -> None:
    setup_logging()
    days = int(argv[1]) if len(argv) > 1 else 7
    deleted = DocumentGenerator().cleanup_old_files(days_old=days)
    print(f"Removed {deleted} generated files older than {days} days")


if __name__ == "__main__":
    main(sys.argv)
