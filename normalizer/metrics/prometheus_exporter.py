"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


image_normalization_total = Counter(
    "image_normalization_total",
    "Total number of normalisation requests by outcome.",
    ["outcome"],
)

image_encode_attempts = Histogram(
    "image_encode_attempts",
    "Encode passes needed per normalised image.",
    buckets=(1, 2, 3, 4, 5, 6, 7, 8, 10, 15),
)

image_over_budget_total = Counter(
    "image_over_budget_total",
    "Normalised images still above the byte budget at the quality floor.",
)
