"""
API routes for cost report assembly.
"""
from typing import Dict, Any, List, Optional
from decimal import Decimal
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
import logging

from costreport.domain.priced_models import PricedCostComponent, PricedResource, PricedProject
from costreport.domain.report_models import SummaryField, SummaryOptions
from costreport.services.report_assembler import ReportAssembler
from costreport.services.summary_service import build_summary


logger = logging.getLogger(__name__)
router = APIRouter()


class CostComponentModel(BaseModel):
    """Model for a priced cost component."""
    name: str = Field(..., description="Cost component name")
    unit: str = Field(..., description="Unit label, e.g. hours or GB")
    unit_multiplier: Decimal = Field(default=Decimal(1), description="Number of units the price is quoted for")
    hourly_quantity: Optional[Decimal] = Field(None, description="Hourly quantity, null when unknown")
    monthly_quantity: Optional[Decimal] = Field(None, description="Monthly quantity, null when unknown")
    price: Decimal = Field(default=Decimal(0), description="Price per unit")
    hourly_cost: Optional[Decimal] = Field(None, description="Hourly cost, null when unknown")
    monthly_cost: Optional[Decimal] = Field(None, description="Monthly cost, null when unknown")

    def to_domain(self) -> PricedCostComponent:
        return PricedCostComponent(
            name=self.name,
            unit=self.unit,
            unit_multiplier=self.unit_multiplier,
            hourly_quantity=self.hourly_quantity,
            monthly_quantity=self.monthly_quantity,
            price=self.price,
            hourly_cost=self.hourly_cost,
            monthly_cost=self.monthly_cost,
        )


class ResourceModel(BaseModel):
    """Model for a priced resource."""
    name: str = Field(..., description="Resource address")
    resource_type: str = Field(default="", description="Terraform resource type")
    tags: Optional[Dict[str, str]] = Field(None, description="Resource tags")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Metadata used for grouping")
    is_skipped: bool = Field(default=False, description="Resource type is not supported yet")
    no_price: bool = Field(default=False, description="Resource is free by design")
    skip_message: str = Field(default="", description="Reason the resource was skipped")
    hourly_cost: Optional[Decimal] = Field(None, description="Hourly cost, null when unknown")
    monthly_cost: Optional[Decimal] = Field(None, description="Monthly cost, null when unknown")
    cost_components: List[CostComponentModel] = Field(default_factory=list)
    sub_resources: List["ResourceModel"] = Field(default_factory=list)

    def to_domain(self) -> PricedResource:
        return PricedResource(
            name=self.name,
            resource_type=self.resource_type,
            tags=self.tags,
            metadata=dict(self.metadata),
            is_skipped=self.is_skipped,
            no_price=self.no_price,
            skip_message=self.skip_message,
            hourly_cost=self.hourly_cost,
            monthly_cost=self.monthly_cost,
            cost_components=[c.to_domain() for c in self.cost_components],
            sub_resources=[s.to_domain() for s in self.sub_resources],
        )


ResourceModel.model_rebuild()


class ProjectModel(BaseModel):
    """Model for one priced project."""
    name: str = Field(..., description="Project name, usually its path")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Opaque project metadata")
    resources: List[ResourceModel] = Field(default_factory=list)
    past_resources: List[ResourceModel] = Field(default_factory=list)
    diff: List[ResourceModel] = Field(default_factory=list)
    has_diff: bool = Field(default=False, description="Past and diff breakdowns are included")

    def to_domain(self) -> PricedProject:
        return PricedProject(
            name=self.name,
            metadata=self.metadata,
            resources=[r.to_domain() for r in self.resources],
            past_resources=[r.to_domain() for r in self.past_resources],
            diff=[r.to_domain() for r in self.diff],
            has_diff=self.has_diff,
        )


class ReportRequest(BaseModel):
    """Request model for report assembly."""
    projects: List[ProjectModel] = Field(..., description="Priced projects")
    run_id: str = Field(default="", description="Optional run identifier")


class SummaryRequest(BaseModel):
    """Request model for a single summary."""
    resources: List[ResourceModel] = Field(..., description="Priced resources of one project")
    include_unsupported_providers: bool = Field(default=False)
    only_fields: List[str] = Field(default_factory=list, description="Fields to populate, all when empty")


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}


@router.post("/api/report")
async def create_report(
    report_request: ReportRequest,
    show_skipped: bool = Query(False, description="List unsupported resource types in the message")
) -> Dict[str, Any]:
    """
    Assemble a cost report from priced projects.

    Args:
        report_request: Request body with projects and optional run id
        show_skipped: Enumerate unsupported resource types in the message

    Returns:
        JSON response with the report document, merged summaries and
        the unsupported resource types message

    Raises:
        HTTPException: If report assembly fails unexpectedly
    """
    try:
        projects = [p.to_domain() for p in report_request.projects]
        report = ReportAssembler().assemble(projects, run_id=report_request.run_id)

        logger.info(
            "Report request served: %d projects, run_id=%s, show_skipped=%s",
            len(projects),
            report_request.run_id or "-",
            show_skipped,
        )

        return {
            "status": "ok",
            "report": report.root.to_dict(),
            "summary": report.merged_summary().to_dict(),
            "full_summary": report.merged_full_summary().to_dict(),
            "unsupported_message": report.root.unsupported_resources_message(show_skipped),
        }

    except HTTPException:
        # Re-raise HTTP exceptions as-is
        raise
    except Exception as error:
        logger.error("Report assembly failed: %s", error, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while assembling the report"
        ) from error


@router.post("/api/report/summary")
async def create_summary(summary_request: SummaryRequest) -> Dict[str, Any]:
    """
    Summarize one project's resources.

    Args:
        summary_request: Request body with resources and summary options

    Returns:
        JSON response with the summary; unrequested fields are omitted

    Raises:
        HTTPException: If an unknown summary field is requested
    """
    try:
        only_fields = frozenset(SummaryField(name) for name in summary_request.only_fields)
    except ValueError as error:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown summary field: {error}"
        ) from error

    options = SummaryOptions(
        include_unsupported_providers=summary_request.include_unsupported_providers,
        only_fields=only_fields,
    )
    resources = [r.to_domain() for r in summary_request.resources]
    summary = build_summary(resources, options)

    logger.info(
        "Summary request served: %d resources, fields=%s",
        len(resources),
        ",".join(sorted(f.value for f in only_fields)) or "all",
    )

    return {
        "status": "ok",
        "summary": summary.to_dict(),
    }
