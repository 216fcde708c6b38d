"""Resolution services: cache tiers, scheduling, escalation and the resolver."""

from namevault.services.batch_splitter import split
from namevault.services.fallback import EscalationReport, FallbackEscalator
from namevault.services.models import CacheEntry, Record, ResolutionTask, TaskOutcome, make_placeholder
from namevault.services.resolver import ResolverService
from namevault.services.scheduler import BoundedScheduler, run_bounded
from namevault.services.ttl_policy import TTLPolicy
from namevault.services.validity_filter import ValidityFilter

__all__ = [
    "BoundedScheduler",
    "CacheEntry",
    "EscalationReport",
    "FallbackEscalator",
    "Record",
    "ResolutionTask",
    "ResolverService",
    "TTLPolicy",
    "TaskOutcome",
    "ValidityFilter",
    "make_placeholder",
    "run_bounded",
    "split",
]
