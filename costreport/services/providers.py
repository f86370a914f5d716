"""
Supported provider classification.

Which providers are supported is decided outside the report engine; this
module supplies the default classifier used when none is injected.
"""
from typing import Callable, Iterable, Optional

from costreport.core.config import config


def has_supported_provider(resource_type: str, prefixes: Optional[Iterable[str]] = None) -> bool:
    """
    Check whether a resource type belongs to a supported provider.

    Args:
        resource_type: Terraform resource type, e.g. "aws_instance"
        prefixes: Provider prefixes to accept (defaults to configuration)

    Returns:
        True if the resource type starts with one of the prefixes
    """
    if prefixes is None:
        prefixes = config.SUPPORTED_PROVIDER_PREFIXES
    return resource_type.startswith(tuple(prefixes))


def provider_classifier(prefixes: Iterable[str]) -> Callable[[str], bool]:
    """Build a classifier bound to a fixed set of provider prefixes."""
    frozen = tuple(prefixes)

    def classify(resource_type: str) -> bool:
        return has_supported_provider(resource_type, frozen)

    return classify
