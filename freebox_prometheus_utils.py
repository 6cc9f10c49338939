from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

GAUGE = "gauge"
COUNTER = "counter"


@dataclass(frozen=True)
class MetricDesc:
    name: str
    documentation: str
    labels: Sequence[str] = field(default_factory=tuple)
    type: str = GAUGE


class SampleSet:
    """Metric families built during one scrape; safe to feed from several threads."""

    def __init__(self):
        self._families: dict[str, Metric] = {}
        self._lock = threading.Lock()

    def __family(self, desc: MetricDesc) -> Metric:
        family = self._families.get(desc.name)
        if family is None:
            if desc.type == COUNTER:
                family = CounterMetricFamily(desc.name, desc.documentation, labels=list(desc.labels))
            else:
                family = GaugeMetricFamily(desc.name, desc.documentation, labels=list(desc.labels))
            self._families[desc.name] = family
        return family

    def add(self, desc: MetricDesc, value: float, *label_values: str) -> None:
        if len(label_values) != len(desc.labels):
            raise ValueError(f"{desc.name}: expected {len(desc.labels)} label values, got {len(label_values)}")
        with self._lock:
            self.__family(desc).add_metric(list(label_values), float(value))

    def add_with_labels(self, desc: MetricDesc, labels: Mapping[str, str], value: float) -> None:
        """Sample whose label names are only known at scrape time."""
        with self._lock:
            self.__family(desc).add_sample(desc.name, dict(labels), float(value))

    def families(self) -> list[Metric]:
        """Families sorted by name, samples sorted by name and label set."""
        with self._lock:
            result = [self._families[name] for name in sorted(self._families)]
            for family in result:
                family.samples.sort(key=lambda s: (s.name, sorted(s.labels.items())))
            return result


def b(v: Optional[bool]) -> int:
    """bool → 0/1"""
    return 1 if v else 0


def to_label(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def collect_gauge(samples: SampleSet, desc: MetricDesc, value: Optional[int], *labels: str,
                  factor: float = 1.0) -> None:
    if value is not None:
        samples.add(desc, value * factor, *labels)


def collect_counter(samples: SampleSet, desc: MetricDesc, value: Optional[int], *labels: str,
                    factor: float = 1.0) -> None:
    if value is not None:
        samples.add(desc, value * factor, *labels)


def collect_bool(samples: SampleSet, desc: MetricDesc, value: Optional[bool], *labels: str) -> None:
    if value is not None:
        samples.add(desc, b(value), *labels)
