"""
Report assembler service.
Builds per-project breakdowns and summaries and rolls them up into a report.
"""
from typing import Callable, Dict, Iterable, List, Optional
from datetime import datetime, timezone
from decimal import Decimal
import logging

from costreport.core.config import config
from costreport.domain.priced_models import PricedProject
from costreport.domain.report_models import (
    Breakdown,
    ProjectResult,
    Report,
    Root,
    Summary,
    SummaryField,
    SummaryOptions,
)
from costreport.services.breakdown_builder import output_breakdown
from costreport.services.providers import provider_classifier
from costreport.services.summary_service import build_summary, merge_summaries


logger = logging.getLogger(__name__)


# Per-project summary kept in the document: unsupported types only
RESTRICTED_SUMMARY_FIELDS = frozenset({SummaryField.UNSUPPORTED_RESOURCE_COUNTS})


def _add_optional_cost(total: Optional[Decimal], cost: Optional[Decimal]) -> Optional[Decimal]:
    """Add a cost to a running total that stays None until something contributes."""
    if cost is None:
        return total
    if total is None:
        total = Decimal(0)
    return total + cost


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportAssembler:
    """Service for assembling a cost report from priced projects."""

    def __init__(
        self,
        version: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        provider_supported: Optional[Callable[[str], bool]] = None
    ):
        """
        Initialize report assembler.

        Args:
            version: Report schema version (defaults to configuration)
            clock: Source of the generation timestamp (defaults to UTC now)
            provider_supported: Resource type classifier for the restricted summary
                (defaults to the configured provider prefixes)
        """
        self.version = version or config.OUTPUT_VERSION
        self.clock = clock or _utc_now
        self.restricted_summary_options = SummaryOptions(
            only_fields=RESTRICTED_SUMMARY_FIELDS,
            provider_supported=provider_supported or provider_classifier(config.SUPPORTED_PROVIDER_PREFIXES),
        )
        self.full_summary_options = SummaryOptions(include_unsupported_providers=True)

    def build_project_result(self, project: PricedProject) -> ProjectResult:
        """
        Build the serializable result of one project.

        The past and diff breakdowns are only built when the project carries a
        diff against a previous state.
        """
        past_breakdown: Optional[Breakdown] = None
        diff: Optional[Breakdown] = None

        breakdown = output_breakdown(project.resources)

        if project.has_diff:
            past_breakdown = output_breakdown(project.past_resources)
            diff = output_breakdown(project.diff)

        logger.debug(
            "Project %s: %d resources, has_diff=%s",
            project.name,
            len(breakdown.resources),
            project.has_diff,
        )

        return ProjectResult(
            project_name=project.name,
            project_metadata=project.metadata,
            past_breakdown=past_breakdown,
            breakdown=breakdown,
            diff=diff,
            summary=build_summary(project.resources, self.restricted_summary_options),
        )

    def build_full_summary(self, project: PricedProject) -> Summary:
        """Build the all-fields, all-providers summary of one project."""
        return build_summary(project.resources, self.full_summary_options)

    def assemble(self, projects: Iterable[PricedProject], run_id: str = "") -> Report:
        """
        Assemble a report from priced projects.

        Project results keep the input order. Report-wide totals are None until
        the first project breakdown contributes a cost.

        Args:
            projects: Priced projects to include
            run_id: Optional identifier of the run that produced the report

        Returns:
            Report holding the serializable root and the full per-project summaries
        """
        project_results: List[ProjectResult] = []
        full_summaries: Dict[str, Summary] = {}
        total_hourly_cost: Optional[Decimal] = None
        total_monthly_cost: Optional[Decimal] = None

        for project in projects:
            project_result = self.build_project_result(project)
            project_results.append(project_result)

            breakdown = project_result.breakdown
            if breakdown is not None:
                total_hourly_cost = _add_optional_cost(total_hourly_cost, breakdown.total_hourly_cost)
                total_monthly_cost = _add_optional_cost(total_monthly_cost, breakdown.total_monthly_cost)

            full_summary = self.build_full_summary(project)
            if project.name in full_summaries:
                # Projects sharing a name share one entry
                full_summary = merge_summaries([full_summaries[project.name], full_summary])
            full_summaries[project.name] = full_summary

        logger.info(
            "Assembled report for %d projects (run_id=%s)",
            len(project_results),
            run_id or "-",
        )

        root = Root(
            version=self.version,
            time_generated=self.clock(),
            project_results=project_results,
            run_id=run_id,
            total_hourly_cost=total_hourly_cost,
            total_monthly_cost=total_monthly_cost,
        )

        return Report(root=root, full_summaries=full_summaries)


def to_output_format(projects: Iterable[PricedProject], run_id: str = "") -> Report:
    """Assemble a report with the default assembler."""
    return ReportAssembler().assemble(projects, run_id=run_id)
