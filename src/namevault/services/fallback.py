"""Fallback escalation.

Each batch gets one bulk attempt. A batch whose bulk call fails in any way
is abandoned as a unit and every one of its keys is retried alone. The two
phases run one after the other, each under its own window, so the number
of remote calls in flight never exceeds the window of the active phase.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from namevault.core.statistics import StatisticsCollector
from namevault.services.models import Batch, Record, ResolutionTask, TaskMode, TaskOutcome
from namevault.services.remote.client import RemoteResolveClient
from namevault.services.scheduler import BoundedScheduler, CancelSignal
from namevault.shared.constants import LogContextKeys, LogOperationNames, ResolverDefaults
from namevault.shared.errors import (
    ErrorCode,
    ErrorContext,
    NameVaultError,
    ResolverNetworkError,
    create_validation_error,
)
from namevault.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

RecordsCallback = Callable[[Mapping[int, Record]], None]


@dataclass
class EscalationReport:
    """Everything the escalator learned about a set of batches.

    Attributes:
        records: Records resolved remotely, in completion order
        omitted_keys: Keys a successful call did not answer
        failed_keys: Keys whose single-key call failed
        cancelled_keys: Keys never attempted because of cancellation
        errors: Last error seen per failed key
        escalated_batches: Batches whose bulk call failed
        call_errors: Every remote call error, in completion order
        bulk_calls: Bulk calls issued
        fallback_calls: Single-key calls issued
        bulk_max_in_flight: Peak concurrent bulk calls of this run
        fallback_max_in_flight: Peak concurrent single-key calls of this run
    """

    records: dict[int, Record] = field(default_factory=dict)
    omitted_keys: set[int] = field(default_factory=set)
    failed_keys: set[int] = field(default_factory=set)
    cancelled_keys: set[int] = field(default_factory=set)
    errors: dict[int, BaseException] = field(default_factory=dict)
    escalated_batches: list[Batch] = field(default_factory=list)
    call_errors: list[BaseException] = field(default_factory=list)
    bulk_calls: int = 0
    fallback_calls: int = 0
    bulk_max_in_flight: int = 0
    fallback_max_in_flight: int = 0

    @property
    def remote_calls(self) -> int:
        return self.bulk_calls + self.fallback_calls

    @property
    def any_remote_success(self) -> bool:
        return len(self.call_errors) < self.remote_calls

    @property
    def unresolved_keys(self) -> set[int]:
        """Keys that need a placeholder."""
        return self.omitted_keys | self.failed_keys | self.cancelled_keys

    @property
    def offline(self) -> bool:
        """True when calls were made and every one failed to reach the remote."""
        return (
            self.remote_calls > 0
            and not self.any_remote_success
            and all(
                isinstance(error, ResolverNetworkError) and error.is_connectivity_failure
                for error in self.call_errors
            )
        )


class FallbackEscalator:
    """Bulk-then-single resolution over a bounded window.

    Args:
        client: Remote resolve client
        bulk_window: Bulk calls in flight
        fallback_window: Single-key calls in flight
        statistics: Optional statistics collector

    Example:
        >>> escalator = FallbackEscalator(client, bulk_window=4, fallback_window=10)
        >>> report = await escalator.escalate([(10, 20, 30)], "/universe/names/")
        >>> report.fallback_calls  # when the bulk call failed
        3
    """

    def __init__(
        self,
        client: RemoteResolveClient,
        bulk_window: int = ResolverDefaults.BULK_WINDOW,
        fallback_window: int = ResolverDefaults.FALLBACK_WINDOW,
        statistics: StatisticsCollector | None = None,
    ) -> None:
        for field_name, window in (("bulk_window", bulk_window), ("fallback_window", fallback_window)):
            if window < 1:
                raise create_validation_error(
                    f"{field_name} must be at least 1, got {window}",
                    field=field_name,
                    operation="escalator_init",
                )
        self.client = client
        self.bulk_window = bulk_window
        self.fallback_window = fallback_window
        self.statistics = statistics

    async def escalate(
        self,
        batches: Sequence[Batch],
        endpoint: str,
        cancel_event: CancelSignal | None = None,
        on_records: RecordsCallback | None = None,
    ) -> EscalationReport:
        """Resolve ``batches`` against ``endpoint``.

        Args:
            batches: Disjoint batches of addressable keys
            endpoint: Endpoint path of the profile
            cancel_event: Optional cooperative cancellation signal
            on_records: Called with each call's records as soon as it completes

        Returns:
            EscalationReport covering every key of every batch
        """
        report = EscalationReport()
        started = time.perf_counter()
        # Per-call schedulers: their counters describe this run only
        bulk_scheduler = BoundedScheduler(self.bulk_window)
        fallback_scheduler = BoundedScheduler(self.fallback_window)

        async def call(task: ResolutionTask) -> dict[int, Record]:
            if task.mode is TaskMode.BULK:
                report.bulk_calls += 1
            else:
                report.fallback_calls += 1
            records = await self.client.resolve(endpoint, task.keys)
            if on_records is not None and records:
                on_records(records)
            return records

        bulk_outcomes = await bulk_scheduler.run(
            [ResolutionTask.bulk(batch) for batch in batches],
            call,
            cancel_event,
        )
        report.bulk_max_in_flight = bulk_scheduler.max_in_flight

        escalated: list[int] = []
        for outcome in bulk_outcomes:
            batch = outcome.task.keys
            if outcome.cancelled:
                report.cancelled_keys.update(batch)
            elif outcome.succeeded:
                self._absorb(report, batch, outcome.records)
            else:
                report.call_errors.append(outcome.error)
                report.escalated_batches.append(batch)
                escalated.extend(batch)
                self._log_failure(outcome, LogOperationNames.ESCALATE_BATCH, endpoint)

        if report.escalated_batches and self.statistics is not None:
            self.statistics.record_escalation(len(report.escalated_batches))

        if escalated:
            single_outcomes = await fallback_scheduler.run(
                [ResolutionTask.single(key) for key in escalated],
                call,
                cancel_event,
            )
            report.fallback_max_in_flight = fallback_scheduler.max_in_flight
            for outcome in single_outcomes:
                (key,) = outcome.task.keys
                if outcome.cancelled:
                    report.cancelled_keys.add(key)
                elif outcome.succeeded:
                    self._absorb(report, (key,), outcome.records)
                else:
                    report.call_errors.append(outcome.error)
                    report.failed_keys.add(key)
                    report.errors[key] = outcome.error
                    self._log_failure(outcome, LogOperationNames.SINGLE_RESOLVE, endpoint)

        log_operation_success(
            logger=logger,
            operation=LogOperationNames.BULK_RESOLVE,
            duration_ms=(time.perf_counter() - started) * 1000,
            result_info={
                "batches": len(batches),
                "escalated_batches": len(report.escalated_batches),
                "bulk_calls": report.bulk_calls,
                "fallback_calls": report.fallback_calls,
                "bulk_max_in_flight": report.bulk_max_in_flight,
                "fallback_max_in_flight": report.fallback_max_in_flight,
                "resolved": len(report.records),
                "unresolved": len(report.unresolved_keys),
            },
            context={LogContextKeys.ENDPOINT: endpoint},
        )
        return report

    @staticmethod
    def _absorb(report: EscalationReport, keys: Batch, records: Mapping[int, Record]) -> None:
        for key in keys:
            record = records.get(key)
            if record is None:
                report.omitted_keys.add(key)
            else:
                report.records[key] = record

    @staticmethod
    def _log_failure(outcome: TaskOutcome, operation: str, endpoint: str) -> None:
        error = outcome.error
        keys = outcome.task.keys
        context = {
            LogContextKeys.ENDPOINT: endpoint,
            LogContextKeys.KEY_COUNT: len(keys),
            LogContextKeys.ERROR_TYPE: type(error).__name__,
        }
        if not isinstance(error, NameVaultError):
            error = NameVaultError(
                code=ErrorCode.API_REQUEST_FAILED,
                message=f"Remote call failed: {error!s}",
                context=ErrorContext(operation=operation),
                original_error=error,
            )
        log_operation_error(
            logger=logger,
            error=error,
            operation=operation,
            additional_context=context,
            level=logging.WARNING,
        )


__all__ = ["EscalationReport", "FallbackEscalator"]
