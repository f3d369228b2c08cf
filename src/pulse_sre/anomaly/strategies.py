"""Detection strategies for statistical anomaly detection."""

from __future__ import annotations


class StatisticalStrategy:
    """Z-score based anomaly detection."""

    def __init__(self, threshold: float = 2.0, probability_scale: float = 10.0) -> None:
        self.threshold = threshold
        self.probability_scale = probability_scale

    def zscore(self, value: float, mean: float, std_dev: float) -> float:
        """Absolute distance of *value* from *mean* in standard deviations."""
        if std_dev == 0:
            return 0.0
        return abs(value - mean) / std_dev

    def check_zscore(self, value: float, mean: float, std_dev: float) -> tuple[bool, float]:
        """Check if a value is anomalous using z-score.

        Returns (is_anomaly, z_score). The comparison is strict, a z-score
        equal to the threshold is not anomalous.
        """
        z = self.zscore(value, mean, std_dev)
        return z > self.threshold, z

    def probability(self, z_score: float) -> float:
        """Map a z-score onto a saturating [0, 1] severity proxy."""
        if self.probability_scale <= 0:
            return 1.0
        return min(z_score / self.probability_scale, 1.0)
