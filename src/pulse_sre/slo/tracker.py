"""SLO tracker: error budget and burn-rate accounting per SLO."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from pulse_sre.metrics import Metric
from pulse_sre.slo.indicators import calculate_burn_rate, current_value, format_duration
from pulse_sre.slo.objectives import SLO, BudgetRule, SLOStatus
from pulse_sre.telemetry import PulseMetrics

logger = logging.getLogger(__name__)

MAX_HISTORY = 1000
BUDGET_PENALTY = 10.0
EXHAUST_HORIZON_HOURS = 168.0  # one week


class SLOTracker:
    """Tracks declared SLOs against the metrics pushed for them.

    The SLO table, status table and metric history are guarded by one
    lock. Writers hold it for the whole update including the status
    recompute; readers get copies and never see a half-applied update.
    """

    def __init__(
        self,
        max_history: int = MAX_HISTORY,
        telemetry: PulseMetrics | None = None,
    ) -> None:
        self._max_history = max_history
        self._telemetry = telemetry
        self._slos: dict[str, SLO] = {}
        self._status: dict[str, SLOStatus] = {}
        self._metrics: dict[str, list[Metric]] = {}
        self._lock = threading.RLock()

    # -- writers ----------------------------------------------------------

    def add_slo(self, slo: SLO) -> None:
        """Register *slo*, replacing any SLO of the same name.

        The status is reset to the neutral state. Retained history for the
        name is kept, so the next update recomputes over old and new samples.
        """
        with self._lock:
            replaced = slo.name in self._slos
            self._slos[slo.name] = slo
            self._status[slo.name] = SLOStatus.initial(slo)
            self._metrics.setdefault(slo.name, [])
        logger.info(
            "%s SLO %s (sli=%s, target=%.2f)",
            "Replaced" if replaced else "Added", slo.name, slo.sli.value, slo.target,
        )

    def remove_slo(self, slo_name: str) -> bool:
        """Stop tracking *slo_name*. Returns whether it was tracked."""
        with self._lock:
            if slo_name not in self._slos:
                return False
            del self._slos[slo_name]
            del self._status[slo_name]
            self._metrics.pop(slo_name, None)
        logger.info("Removed SLO %s", slo_name)
        return True

    def update_metrics(self, slo_name: str, metrics: Iterable[Metric]) -> None:
        """Append *metrics* to the SLO's history and recompute its status.

        Unknown SLO names are ignored.
        """
        with self._lock:
            if slo_name not in self._slos:
                logger.debug("Ignoring metrics for unknown SLO %s", slo_name)
                return

            history = self._metrics[slo_name]
            history.extend(metrics)
            if len(history) > self._max_history:
                del history[: len(history) - self._max_history]

            self._calculate_slo_status(slo_name)

    def _calculate_slo_status(self, slo_name: str) -> None:
        slo = self._slos[slo_name]
        status = self._status[slo_name]
        history = self._metrics[slo_name]
        if not history:
            return

        was_violated = status.is_violated

        status.current_value = current_value(slo.sli, history)
        if status.current_value < slo.target:
            deficit = slo.target - status.current_value
            status.error_budget = max(0.0, 100.0 - deficit * BUDGET_PENALTY)
        else:
            status.error_budget = 100.0

        status.burn_rate = calculate_burn_rate(history)
        status.is_violated = status.current_value < slo.target

        status.time_to_exhaust = None
        if status.burn_rate > 0:
            hours_left = status.error_budget / status.burn_rate
            if hours_left < EXHAUST_HORIZON_HOURS:
                status.time_to_exhaust = format_duration(hours_left)

        if status.is_violated and not was_violated:
            logger.warning(
                "SLO %s violated: %.2f < target %.2f (budget %.1f%%)",
                slo_name, status.current_value, slo.target, status.error_budget,
            )
        elif was_violated and not status.is_violated:
            logger.info("SLO %s recovered: %.2f", slo_name, status.current_value)

        if self._telemetry is not None:
            self._telemetry.record_slo(
                slo_name,
                slo.sli.value,
                status.current_value,
                status.error_budget,
                status.burn_rate,
            )

    # -- readers ----------------------------------------------------------

    def get_slo_status(self, slo_name: str) -> tuple[SLOStatus | None, bool]:
        """Return a snapshot of the status for *slo_name* and whether it exists."""
        with self._lock:
            status = self._status.get(slo_name)
            if status is None:
                return None, False
            return status.copy(), True

    def get_all_slos(self) -> dict[str, SLOStatus]:
        """Return a snapshot of every SLO status keyed by name."""
        with self._lock:
            return {name: status.copy() for name, status in self._status.items()}

    def get_slo(self, slo_name: str) -> SLO | None:
        with self._lock:
            return self._slos.get(slo_name)

    def slo_names(self) -> list[str]:
        with self._lock:
            return sorted(self._slos)

    def history_size(self, slo_name: str) -> int:
        with self._lock:
            return len(self._metrics.get(slo_name, ()))

    def triggered_actions(self, slo_name: str) -> list[BudgetRule]:
        """Budget policy rules currently reached for *slo_name*."""
        with self._lock:
            status = self._status.get(slo_name)
            if status is None:
                return []
            return status.triggered_rules()
