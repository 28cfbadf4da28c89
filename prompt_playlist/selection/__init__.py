from .delegate import CompletionClient, SelectionDelegate
from .filtering import FilterResult, filter_and_rank
from .openai_client import OpenAIClient
from .reconcile import CatalogReconciler, reconcile

__all__ = [
    "CompletionClient",
    "SelectionDelegate",
    "FilterResult",
    "filter_and_rank",
    "OpenAIClient",
    "CatalogReconciler",
    "reconcile",
]
