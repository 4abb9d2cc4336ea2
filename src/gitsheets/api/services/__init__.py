"""Service layer for the gitsheets API."""

from .sheets import SheetsService

__all__ = ["SheetsService"]
