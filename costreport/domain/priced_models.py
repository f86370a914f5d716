"""
Domain models for priced resources.
Defines the already-priced objects handed over by the parsing/pricing pipeline.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class PricedCostComponent:
    """A priced line item as produced by the pricing pipeline."""
    name: str
    unit: str
    price: Decimal = Decimal(0)
    unit_multiplier: Decimal = Decimal(1)
    hourly_quantity: Optional[Decimal] = None
    monthly_quantity: Optional[Decimal] = None
    hourly_cost: Optional[Decimal] = None
    monthly_cost: Optional[Decimal] = None

    def unit_with_multiplier(self) -> str:
        """Display unit, e.g. "100 GB" when prices are quoted per 100 GB."""
        if self.unit_multiplier == 1:
            return self.unit
        return f"{self.unit_multiplier} {self.unit}"

    def unit_multiplier_hourly_quantity(self) -> Optional[Decimal]:
        if self.hourly_quantity is None:
            return None
        return self.hourly_quantity / self.unit_multiplier

    def unit_multiplier_monthly_quantity(self) -> Optional[Decimal]:
        if self.monthly_quantity is None:
            return None
        return self.monthly_quantity / self.unit_multiplier

    def unit_multiplier_price(self) -> Decimal:
        return self.price * self.unit_multiplier


@dataclass
class PricedResource:
    """
    A priced infrastructure resource.

    is_skipped marks resource types the pricing pipeline does not support yet;
    no_price marks resources that are free by design (e.g. data sources).
    """
    name: str
    resource_type: str = ""
    tags: Optional[Dict[str, str]] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    is_skipped: bool = False
    no_price: bool = False
    skip_message: str = ""
    hourly_cost: Optional[Decimal] = None
    monthly_cost: Optional[Decimal] = None
    cost_components: List[PricedCostComponent] = field(default_factory=list)
    sub_resources: List["PricedResource"] = field(default_factory=list)


@dataclass
class PricedProject:
    """One evaluated project with its current and, optionally, past resources."""
    name: str
    metadata: Optional[Dict[str, Any]] = None
    resources: List[PricedResource] = field(default_factory=list)
    past_resources: List[PricedResource] = field(default_factory=list)
    diff: List[PricedResource] = field(default_factory=list)
    has_diff: bool = False
