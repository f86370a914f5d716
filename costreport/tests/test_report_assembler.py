"""
Tests for report assembly across projects.
"""

import logging
import pytest
from datetime import datetime
from decimal import Decimal
from costreport.domain.priced_models import PricedResource, PricedProject
from costreport.domain.report_models import Summary
from costreport.core.config import config
from costreport.services.providers import provider_classifier
from costreport.services.report_assembler import ReportAssembler, to_output_format


@pytest.fixture
def assembler(fixed_clock):
    """Assembler with a fixed generation time."""
    return ReportAssembler(version="0.1", clock=fixed_clock)


@pytest.fixture
def diff_project():
    """Project compared against a previous state."""
    return PricedProject(
        name="infra/staging",
        resources=[
            PricedResource(name="aws_instance.web", resource_type="aws_instance",
                           hourly_cost=Decimal("2"), monthly_cost=Decimal("1460")),
        ],
        past_resources=[
            PricedResource(name="aws_instance.web", resource_type="aws_instance",
                           hourly_cost=Decimal("1"), monthly_cost=Decimal("730")),
        ],
        diff=[
            PricedResource(name="aws_instance.web", resource_type="aws_instance",
                           hourly_cost=Decimal("1"), monthly_cost=Decimal("730")),
        ],
        has_diff=True,
    )


def test_project_result_scenario(assembler, sample_project):
    """A project gets a sorted breakdown, totals and an unsupported-only summary."""
    report = assembler.assemble([sample_project])
    result = report.root.project_results[0]

    assert result.project_name == "infra/prod"
    assert result.project_metadata == {"path": "infra/prod"}
    assert [r.name for r in result.breakdown.resources] == ["a", "b"]
    assert result.breakdown.total_hourly_cost == Decimal("3.00")
    assert result.breakdown.total_monthly_cost == Decimal("2190.00")
    assert result.past_breakdown is None
    assert result.diff is None
    # unknown_type has no supported provider, so the restricted summary ignores it
    assert result.summary == Summary(unsupported_resource_counts={})


def test_full_summary_kept_outside_the_document(assembler, sample_project):
    """The full summary covers all providers and is not part of the project result."""
    report = assembler.assemble([sample_project])

    full = report.full_summaries["infra/prod"]
    assert full.total_supported_resources == 2
    assert full.total_unsupported_resources == 1
    assert full.unsupported_resource_counts == {"unknown_type": 1}
    assert "fullSummary" not in report.root.project_results[0].to_dict()


def test_diff_breakdowns_built_only_with_diff(assembler, diff_project):
    """Past and diff breakdowns are present when the project has a diff."""
    result = assembler.assemble([diff_project]).root.project_results[0]

    assert result.past_breakdown.total_monthly_cost == Decimal("730")
    assert result.breakdown.total_monthly_cost == Decimal("1460")
    assert result.diff.total_hourly_cost == Decimal("1")


def test_report_totals_sum_current_breakdowns(assembler, sample_project, diff_project):
    """Report-wide totals add up the current breakdowns only."""
    root = assembler.assemble([sample_project, diff_project]).root

    assert root.total_hourly_cost == Decimal("5.00")
    assert root.total_monthly_cost == Decimal("3650.00")


def test_empty_project_does_not_poison_totals(assembler):
    """A project without resources adds zero instead of making the total unknown."""
    projects = [
        PricedProject(name="empty"),
        PricedProject(name="paid", resources=[PricedResource(name="x", monthly_cost=Decimal(10))]),
    ]

    root = assembler.assemble(projects).root

    assert root.total_monthly_cost == Decimal(10)
    assert root.total_hourly_cost == Decimal(0)


def test_report_without_projects_has_unknown_totals(assembler):
    """With no projects at all nothing contributes and totals stay None."""
    root = assembler.assemble([]).root

    assert root.total_hourly_cost is None
    assert root.total_monthly_cost is None
    assert root.resources == []
    assert root.project_results == []


def test_project_order_is_preserved(assembler):
    """Project results follow the input order."""
    names = ["zeta", "alpha", "mid"]

    root = assembler.assemble([PricedProject(name=n) for n in names]).root

    assert [p.project_name for p in root.project_results] == names


def test_flattened_resources_are_sorted_by_name(assembler, sample_project, diff_project):
    """The flattened list holds every current resource of every project by name."""
    root = assembler.assemble([diff_project, sample_project]).root

    assert [r.name for r in root.resources] == ["a", "aws_instance.web", "b"]


def test_root_metadata(assembler, fixed_clock):
    """Version, run id and generation time are recorded."""
    root = assembler.assemble([], run_id="run-1").root

    assert root.version == "0.1"
    assert root.run_id == "run-1"
    assert root.time_generated == fixed_clock()


def test_default_clock_is_timezone_aware():
    """The default generation time is an aware UTC timestamp."""
    root = to_output_format([]).root

    assert isinstance(root.time_generated, datetime)
    assert root.time_generated.tzinfo is not None


def test_merged_summaries_are_computed_on_request(assembler, sample_project, diff_project):
    """Restricted and full summaries merge across projects."""
    report = assembler.assemble([sample_project, diff_project])

    merged = report.merged_summary()
    assert merged.unsupported_resource_counts == {}
    assert merged.total_resources is None

    full = report.merged_full_summary()
    assert full.supported_resource_counts == {"aws_instance": 3}
    assert full.unsupported_resource_counts == {"unknown_type": 1}
    assert full.total_resources == 4


def test_projects_sharing_a_name_share_a_full_summary(assembler, sample_project):
    """Full summaries of same-named projects are merged, not overwritten."""
    report = assembler.assemble([sample_project, sample_project])

    assert list(report.full_summaries) == ["infra/prod"]
    assert report.full_summaries["infra/prod"].total_resources == 6
    assert report.merged_full_summary().total_supported_resources == 4


def test_unsupported_message_from_root(assembler):
    """The root builds the message from the merged restricted summary."""
    project = PricedProject(
        name="p",
        resources=[PricedResource(name="aws_foo.x", resource_type="aws_foo", is_skipped=True)],
    )

    root = assembler.assemble([project]).root

    assert root.unsupported_resources_message(False).startswith(
        "1 resource type wasn't estimated as it's not supported yet"
    )


def test_assembly_is_logged(assembler, sample_project, caplog):
    """Assembly logs the number of projects."""
    with caplog.at_level(logging.INFO, logger="costreport.services.report_assembler"):
        assembler.assemble([sample_project], run_id="run-9")

    assert "Assembled report for 1 projects (run_id=run-9)" in caplog.text


def test_restricted_summary_uses_injected_classifier(fixed_clock, sample_project):
    """A custom classifier decides which providers the restricted summary counts."""
    assembler = ReportAssembler(clock=fixed_clock, provider_supported=provider_classifier(["unknown_"]))

    result = assembler.assemble([sample_project]).root.project_results[0]

    assert result.summary == Summary(unsupported_resource_counts={"unknown_type": 1})


def test_default_classifier_follows_configured_prefixes(fixed_clock, sample_project, monkeypatch):
    """Without a custom classifier the configured provider prefixes apply."""
    monkeypatch.setattr(config, "SUPPORTED_PROVIDER_PREFIXES", ("unknown_",))

    result = ReportAssembler(clock=fixed_clock).assemble([sample_project]).root.project_results[0]

    assert result.summary.unsupported_resource_counts == {"unknown_type": 1}
