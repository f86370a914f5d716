"""
Summary service.
Classifies resources into supported, unsupported and no-price buckets and merges summaries.
"""
from typing import Dict, Iterable, Optional
import logging

from costreport.core.config import config
from costreport.domain.priced_models import PricedResource
from costreport.domain.report_models import Summary, SummaryField, SummaryOptions
from costreport.services.providers import has_supported_provider


logger = logging.getLogger(__name__)


def build_summary(
    resources: Optional[Iterable[PricedResource]],
    options: Optional[SummaryOptions] = None
) -> Summary:
    """
    Build a summary of a project's resources.

    Each resource lands in exactly one bucket: no-price, unsupported (skipped)
    or supported. Unless options.include_unsupported_providers is set, resources
    of providers that are not supported at all are left out of every bucket.
    The resource total always counts every input resource.

    Args:
        resources: Priced resources of the project
        options: Provider filtering and field selection

    Returns:
        Summary with unrequested fields left as None
    """
    options = options or SummaryOptions()
    resources = list(resources or ())
    provider_supported = options.provider_supported or has_supported_provider

    supported_resource_counts: Dict[str, int] = {}
    unsupported_resource_counts: Dict[str, int] = {}
    total_supported_resources = 0
    total_unsupported_resources = 0
    total_no_price_resources = 0

    for resource in resources:
        if not options.include_unsupported_providers and not provider_supported(resource.resource_type):
            continue

        if resource.no_price:
            total_no_price_resources += 1
        elif resource.is_skipped:
            total_unsupported_resources += 1
            unsupported_resource_counts[resource.resource_type] = (
                unsupported_resource_counts.get(resource.resource_type, 0) + 1
            )
        else:
            total_supported_resources += 1
            supported_resource_counts[resource.resource_type] = (
                supported_resource_counts.get(resource.resource_type, 0) + 1
            )

    logger.debug(
        "Classified %d resources: %d supported, %d unsupported, %d no price",
        len(resources),
        total_supported_resources,
        total_unsupported_resources,
        total_no_price_resources,
    )

    summary = Summary()

    if options.wants(SummaryField.SUPPORTED_RESOURCE_COUNTS):
        summary.supported_resource_counts = supported_resource_counts
    if options.wants(SummaryField.UNSUPPORTED_RESOURCE_COUNTS):
        summary.unsupported_resource_counts = unsupported_resource_counts
    if options.wants(SummaryField.TOTAL_SUPPORTED_RESOURCES):
        summary.total_supported_resources = total_supported_resources
    if options.wants(SummaryField.TOTAL_UNSUPPORTED_RESOURCES):
        summary.total_unsupported_resources = total_unsupported_resources
    if options.wants(SummaryField.TOTAL_NO_PRICE_RESOURCES):
        summary.total_no_price_resources = total_no_price_resources
    if options.wants(SummaryField.TOTAL_RESOURCES):
        summary.total_resources = len(resources)

    return summary


def _merge_counts(
    counts1: Optional[Dict[str, int]],
    counts2: Optional[Dict[str, int]]
) -> Optional[Dict[str, int]]:
    if counts1 is None and counts2 is None:
        return None

    merged = dict(counts1 or {})
    for resource_type, count in (counts2 or {}).items():
        merged[resource_type] = merged.get(resource_type, 0) + count
    return merged


def _add_optional_ints(value1: Optional[int], value2: Optional[int]) -> Optional[int]:
    if value1 is None and value2 is None:
        return None
    return (value1 or 0) + (value2 or 0)


def merge_summaries(summaries: Iterable[Optional[Summary]]) -> Summary:
    """
    Merge summaries field by field.

    None summaries are skipped. A merged field stays None only when it is None
    in every input; otherwise the present values are added up.

    Args:
        summaries: Summaries to merge, possibly containing None

    Returns:
        New Summary that shares no maps with its inputs
    """
    merged = Summary()

    for summary in summaries:
        if summary is None:
            continue

        merged.supported_resource_counts = _merge_counts(
            merged.supported_resource_counts, summary.supported_resource_counts
        )
        merged.unsupported_resource_counts = _merge_counts(
            merged.unsupported_resource_counts, summary.unsupported_resource_counts
        )
        merged.total_supported_resources = _add_optional_ints(
            merged.total_supported_resources, summary.total_supported_resources
        )
        merged.total_unsupported_resources = _add_optional_ints(
            merged.total_unsupported_resources, summary.total_unsupported_resources
        )
        merged.total_no_price_resources = _add_optional_ints(
            merged.total_no_price_resources, summary.total_no_price_resources
        )
        merged.total_resources = _add_optional_ints(
            merged.total_resources, summary.total_resources
        )

    return merged


def unsupported_resources_message(summary: Summary, show_skipped: bool) -> str:
    """
    Describe the resource types that were not estimated.

    Args:
        summary: Merged summary
        show_skipped: List every unsupported type with its count

    Returns:
        Message text, or an empty string when nothing was skipped
    """
    counts = summary.unsupported_resource_counts
    if not counts:
        return ""

    unsupported_type_count = len(counts)

    unsupported_msg = "resource types weren't estimated as they're not supported yet"
    if unsupported_type_count == 1:
        unsupported_msg = "resource type wasn't estimated as it's not supported yet"

    show_skipped_msg = ""
    if not show_skipped:
        show_skipped_msg = f", rerun with {config.SHOW_SKIPPED_FLAG} to see"

    msg = f"{unsupported_type_count} {unsupported_msg}{show_skipped_msg}.\n{config.CALL_TO_ACTION_MESSAGE}"

    if show_skipped:
        for resource_type in sorted(counts):
            msg += f"\n{counts[resource_type]} x {resource_type}"

    return msg
