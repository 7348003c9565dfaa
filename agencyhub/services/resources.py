# agencyhub/services/resources.py
"""
Capacity figures and recommendations for a hosted service.

Works from the latest allocations only; older readings are history and do
not move the averages.
"""
from __future__ import annotations

from decimal import Decimal

from ..billing.pricing import ZERO, to_decimal
from ..models import ResourceAllocation, Service

RECENT_ALLOCATIONS = 10
SCALE_UP_USAGE_PERCENT = Decimal("80")
UNDERUSED_RATIO = Decimal("0.6")


def recent_allocations(service: Service) -> list[ResourceAllocation]:
    # Relationship is ordered newest first.
    return list(service.resource_allocations[:RECENT_ALLOCATIONS])


def _underused(allocation: ResourceAllocation) -> bool:
    allocated = to_decimal(allocation.allocated)
    if allocated <= 0:
        return False
    return to_decimal(allocation.used) / allocated < UNDERUSED_RATIO


def resource_metrics(service: Service, allocations: list[ResourceAllocation]) -> dict[str, Decimal]:
    used = [to_decimal(a.used) for a in allocations]
    return {
        "totalCapacity": to_decimal(service.capacity_limit),
        "currentUsage": to_decimal(service.current_usage),
        "averageUsage": (sum(used, ZERO) / len(used)) if used else ZERO,
        "peakUsage": max(used) if used else ZERO,
        "costPerUnit": to_decimal(service.cost_per_unit),
    }


def recommendations(metrics: dict[str, Decimal], allocations: list[ResourceAllocation]) -> list[dict]:
    recs = []

    capacity = metrics["totalCapacity"]
    if capacity > 0:
        usage_percent = metrics["currentUsage"] / capacity * 100
        if usage_percent > SCALE_UP_USAGE_PERCENT:
            recs.append({
                "type": "scaling",
                "title": "Consider scaling up capacity",
                "description": (
                    f"Current usage is at {round(usage_percent)}% of capacity. "
                    "Consider increasing capacity by 20%."
                ),
                "impact": "high",
            })

    underused = [a for a in allocations if _underused(a)]
    if underused:
        savings = sum(
            ((to_decimal(a.allocated) - to_decimal(a.used)) * metrics["costPerUnit"] for a in underused),
            ZERO,
        )
        recs.append({
            "type": "optimization",
            "title": "Optimize resource allocation",
            "description": (
                "Some clients are significantly under-utilizing their allocated resources. "
                "Consider reallocation."
            ),
            "impact": "medium",
            "estimatedSavings": round(savings),
        })

    return recs
