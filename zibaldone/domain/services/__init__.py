"""Domain services for the zibaldone application."""

from .book_service import BookService
from .layout import BookLayout
from .locks import BookLocks
from .reconciler import FragmentReconciler
from .renderer import BookRenderer

__all__ = [
    "BookLayout",
    "BookLocks",
    "BookRenderer",
    "BookService",
    "FragmentReconciler",
]
