"""
Domain models for the cost report.
Defines the normalized resource tree, breakdowns, summaries and the report root.

Optional costs and counts use None for "unknown" or "not requested". None is
never interchangeable with zero, and serialization keeps the two apart.
"""
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


def _decimal_to_json(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    # Always fixed-point, never exponent notation
    return format(value, "f")


@dataclass(frozen=True)
class CostComponent:
    """A priced line item of a resource, with units already resolved for display."""
    name: str
    unit: str
    price: Decimal
    hourly_quantity: Optional[Decimal] = None
    monthly_quantity: Optional[Decimal] = None
    hourly_cost: Optional[Decimal] = None
    monthly_cost: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "unit": self.unit,
            "hourlyQuantity": _decimal_to_json(self.hourly_quantity),
            "monthlyQuantity": _decimal_to_json(self.monthly_quantity),
            "price": _decimal_to_json(self.price),
            "hourlyCost": _decimal_to_json(self.hourly_cost),
            "monthlyCost": _decimal_to_json(self.monthly_cost),
        }


@dataclass(frozen=True)
class Resource:
    """
    A normalized resource. Cost components and sub-resources keep source order.

    Immutability is shallow: fields cannot be reassigned, but metadata and tags
    are plain dicts, so instances are not hashable. The normalizer hands each
    resource its own copies of both.
    """
    name: str
    metadata: Dict[str, str] = field(default_factory=dict)
    tags: Optional[Dict[str, str]] = None
    hourly_cost: Optional[Decimal] = None
    monthly_cost: Optional[Decimal] = None
    cost_components: Tuple[CostComponent, ...] = ()
    sub_resources: Tuple["Resource", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {"name": self.name}
        if self.tags:
            result["tags"] = dict(self.tags)
        result["metadata"] = dict(self.metadata)
        result["hourlyCost"] = _decimal_to_json(self.hourly_cost)
        result["monthlyCost"] = _decimal_to_json(self.monthly_cost)
        if self.cost_components:
            result["costComponents"] = [c.to_dict() for c in self.cost_components]
        if self.sub_resources:
            result["subresources"] = [r.to_dict() for r in self.sub_resources]
        return result


@dataclass(frozen=True)
class Breakdown:
    """Resources of one project in one variant (current, past or diff) with totals."""
    resources: Tuple[Resource, ...] = ()
    total_hourly_cost: Optional[Decimal] = None
    total_monthly_cost: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "resources": [r.to_dict() for r in self.resources],
            "totalHourlyCost": _decimal_to_json(self.total_hourly_cost),
            "totalMonthlyCost": _decimal_to_json(self.total_monthly_cost),
        }


class SummaryField(Enum):
    """Summary fields that can be selected through SummaryOptions.only_fields."""
    SUPPORTED_RESOURCE_COUNTS = "SupportedResourceCounts"
    UNSUPPORTED_RESOURCE_COUNTS = "UnsupportedResourceCounts"
    TOTAL_SUPPORTED_RESOURCES = "TotalSupportedResources"
    TOTAL_UNSUPPORTED_RESOURCES = "TotalUnsupportedResources"
    TOTAL_NO_PRICE_RESOURCES = "TotalNoPriceResources"
    TOTAL_RESOURCES = "TotalResources"

    @classmethod
    def _missing_(cls, value):
        # Older callers select the resource total as "Total"
        if value == "Total":
            return cls.TOTAL_RESOURCES
        return None


@dataclass(frozen=True)
class SummaryOptions:
    """
    Options for building a summary.

    Attributes:
        include_unsupported_providers: Count resources whose provider is not supported at all
        only_fields: Fields to populate; empty means all fields
        provider_supported: Classifier for resource types, defaults to the configured prefixes
    """
    include_unsupported_providers: bool = False
    only_fields: FrozenSet[SummaryField] = frozenset()
    provider_supported: Optional[Callable[[str], bool]] = None

    def wants(self, summary_field: SummaryField) -> bool:
        return not self.only_fields or summary_field in self.only_fields


@dataclass
class Summary:
    """
    Resource statistics for one project or merged across projects.

    Every field is optional: None means the statistic was not requested or not
    available, which is different from a zero count or an empty map.
    """
    supported_resource_counts: Optional[Dict[str, int]] = None
    unsupported_resource_counts: Optional[Dict[str, int]] = None
    total_supported_resources: Optional[int] = None
    total_unsupported_resources: Optional[int] = None
    total_no_price_resources: Optional[int] = None
    total_resources: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization. None fields are omitted."""
        values = {
            "supportedResourceCounts": self.supported_resource_counts,
            "unsupportedResourceCounts": self.unsupported_resource_counts,
            "totalSupportedResources": self.total_supported_resources,
            "totalUnsupportedResources": self.total_unsupported_resources,
            "totalNoPriceResources": self.total_no_price_resources,
            "totalResources": self.total_resources,
        }
        result: Dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            result[key] = dict(value) if isinstance(value, dict) else value
        return result


@dataclass(frozen=True)
class ProjectResult:
    """Serializable output for one evaluated project."""
    project_name: str
    project_metadata: Optional[Dict[str, Any]] = None
    past_breakdown: Optional[Breakdown] = None
    breakdown: Optional[Breakdown] = None
    diff: Optional[Breakdown] = None
    summary: Optional[Summary] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "projectName": self.project_name,
            "projectMetadata": self.project_metadata,
            "pastBreakdown": self.past_breakdown.to_dict() if self.past_breakdown else None,
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "diff": self.diff.to_dict() if self.diff else None,
            "summary": self.summary.to_dict() if self.summary else None,
        }


@dataclass
class Root:
    """
    The top-level report document.

    The flattened resource list and report-wide totals exist for consumers of
    the single-project document format. The resource list is derived from the
    project results on access.
    """
    version: str
    time_generated: datetime
    project_results: List[ProjectResult] = field(default_factory=list)
    run_id: str = ""
    total_hourly_cost: Optional[Decimal] = None
    total_monthly_cost: Optional[Decimal] = None

    @property
    def resources(self) -> List[Resource]:
        """All current-breakdown resources across projects, ordered by name."""
        flattened: List[Resource] = []
        for project_result in self.project_results:
            if project_result.breakdown is not None:
                flattened.extend(project_result.breakdown.resources)
        return sorted(flattened, key=lambda r: r.name)

    def merged_summary(self) -> Summary:
        """Merge the restricted per-project summaries."""
        from costreport.services.summary_service import merge_summaries
        return merge_summaries(p.summary for p in self.project_results)

    def unsupported_resources_message(self, show_skipped: bool) -> str:
        from costreport.services.summary_service import unsupported_resources_message
        return unsupported_resources_message(self.merged_summary(), show_skipped)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "version": self.version,
            "resources": [r.to_dict() for r in self.resources],
            "totalHourlyCost": _decimal_to_json(self.total_hourly_cost),
            "totalMonthlyCost": _decimal_to_json(self.total_monthly_cost),
        }
        if self.run_id:
            result["runId"] = self.run_id
        result["projectResults"] = [p.to_dict() for p in self.project_results]
        result["timeGenerated"] = self.time_generated.isoformat()
        return result


@dataclass
class Report:
    """
    Output of report assembly.

    root is the serializable document. full_summaries holds the all-fields,
    all-providers summary of each project, keyed by project name, and is never
    serialized as part of the document.
    """
    root: Root
    full_summaries: Dict[str, Summary] = field(default_factory=dict)

    def merged_summary(self) -> Summary:
        return self.root.merged_summary()

    def merged_full_summary(self) -> Summary:
        """Merge the full per-project summaries."""
        from costreport.services.summary_service import merge_summaries
        return merge_summaries(self.full_summaries.values())
