"""Shared repository layer for the birthday reminder backend."""

from .birthday import BirthdayRepository
from .user import UserRepository

__all__ = [
    "BirthdayRepository",
    "UserRepository",
]
