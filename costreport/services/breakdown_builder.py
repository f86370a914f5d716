"""
Breakdown builder service.
Normalizes priced resources into the report tree, orders them and totals their costs.
"""
from typing import Iterable, List, Optional, Sequence, Tuple
from decimal import Decimal
import logging

from costreport.domain.priced_models import PricedCostComponent, PricedResource
from costreport.domain.report_models import Breakdown, CostComponent, Resource


logger = logging.getLogger(__name__)


def output_cost_component(component: PricedCostComponent) -> CostComponent:
    """Normalize a cost component using the display units resolved upstream."""
    return CostComponent(
        name=component.name,
        unit=component.unit_with_multiplier(),
        hourly_quantity=component.unit_multiplier_hourly_quantity(),
        monthly_quantity=component.unit_multiplier_monthly_quantity(),
        price=component.unit_multiplier_price(),
        hourly_cost=component.hourly_cost,
        monthly_cost=component.monthly_cost,
    )


def output_resource(resource: PricedResource) -> Resource:
    """
    Normalize a priced resource and all of its sub-resources.

    Cost components and sub-resources keep their source order.

    Args:
        resource: Priced resource from the pricing pipeline

    Returns:
        Immutable output Resource
    """
    return Resource(
        name=resource.name,
        metadata=dict(resource.metadata or {}),
        tags=dict(resource.tags) if resource.tags is not None else None,
        hourly_cost=resource.hourly_cost,
        monthly_cost=resource.monthly_cost,
        cost_components=tuple(output_cost_component(c) for c in resource.cost_components),
        sub_resources=tuple(output_resource(s) for s in resource.sub_resources),
    )


def output_resources(resources: Optional[Iterable[PricedResource]]) -> List[Resource]:
    """Normalize a resource list, dropping resources the pricing pipeline skipped."""
    return [output_resource(r) for r in resources or () if not r.is_skipped]


def calculate_total_costs(resources: Iterable[Resource]) -> Tuple[Decimal, Decimal]:
    """
    Sum hourly and monthly costs of a resource list.

    Totals start at zero, so an empty list costs zero. Resources with an
    unknown cost add nothing and leave the running total as it is.

    Returns:
        Tuple of (total_hourly_cost, total_monthly_cost)
    """
    total_hourly_cost = Decimal(0)
    total_monthly_cost = Decimal(0)

    for resource in resources:
        if resource.hourly_cost is not None:
            total_hourly_cost += resource.hourly_cost
        if resource.monthly_cost is not None:
            total_monthly_cost += resource.monthly_cost

    return total_hourly_cost, total_monthly_cost


def sort_resources(resources: Iterable[Resource], group_key: str = "") -> List[Resource]:
    """
    Order resources by a metadata group, then by name.

    An empty group key orders by name only. Resources missing the metadata key
    sort as if its value were the empty string. Sub-resources are left as-is.

    Args:
        resources: Resources to order
        group_key: Metadata key to group by

    Returns:
        New, sorted list
    """
    if not group_key:
        return sorted(resources, key=lambda r: r.name)
    return sorted(resources, key=lambda r: (r.metadata.get(group_key, ""), r.name))


def output_breakdown(resources: Optional[Sequence[PricedResource]]) -> Breakdown:
    """
    Build a breakdown for one project variant (current, past or diff).

    Args:
        resources: Priced resources of the variant

    Returns:
        Breakdown with name-ordered resources and zero-seeded totals
    """
    normalized = sort_resources(output_resources(resources))
    total_hourly_cost, total_monthly_cost = calculate_total_costs(normalized)

    logger.debug(
        "Built breakdown with %d resources (%d skipped)",
        len(normalized),
        len(resources or ()) - len(normalized),
    )

    return Breakdown(
        resources=tuple(normalized),
        total_hourly_cost=total_hourly_cost,
        total_monthly_cost=total_monthly_cost,
    )


def resource_has_nil_costs(resource: Resource) -> bool:
    """Check whether a resource, a cost component or a sub-resource has an unknown monthly cost."""
    if resource.monthly_cost is None:
        return True

    if any(c.monthly_cost is None for c in resource.cost_components):
        return True

    return any(resource_has_nil_costs(s) for s in resource.sub_resources)


def breakdown_has_nil_costs(breakdown: Breakdown) -> bool:
    return any(resource_has_nil_costs(r) for r in breakdown.resources)
