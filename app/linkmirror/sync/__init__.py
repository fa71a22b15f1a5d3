"""Reconciliation and pruning of a destination tree."""

from linkmirror.sync.pruner import Pruner
from linkmirror.sync.reconciler import Reconciler

__all__ = ["Pruner", "Reconciler"]
