"""Concrete notification dispatcher implementations."""

from docgen.strategies.dispatchers.log import LogDispatcher
from docgen.strategies.dispatchers.smtp import SmtpDispatcher

__all__ = [
    "LogDispatcher",
    "SmtpDispatcher",
]
