"""Reconciliation engine exports."""

from .detector import needs_change
from .executor import Executor
from .kinds import KindPolicy, policy_for
from .matcher import match
from .planner import plan
from .reconciler import Reconciler

__all__ = ["Executor", "KindPolicy", "Reconciler", "match", "needs_change", "plan", "policy_for"]
