"""Finding and status validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from cloudguard.models.alert import CATEGORIES, SEVERITIES, STATUSES

MISSING_TYPE_ERROR = "Finding type is required"


@dataclass(frozen=True, slots=True)
class FindingValidation:
    """Outcome of validating a finding.

    Attributes
    ----------
    is_valid : bool
        Whether no errors were found.
    errors : list[str]
        Failures in check order: type, severity, category.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_finding(finding: Mapping[str, Any] | None) -> FindingValidation:
    """Check the shape of an incoming finding.

    Parameters
    ----------
    finding : Mapping[str, Any] | None
        Raw finding payload.

    Returns
    -------
    FindingValidation
        Validity flag and the accumulated error messages.
    """
    if not finding:
        return FindingValidation(is_valid=False, errors=[MISSING_TYPE_ERROR])

    errors: list[str] = []
    if not finding.get("type"):
        errors.append(MISSING_TYPE_ERROR)

    severity = finding.get("severity")
    if severity and severity not in SEVERITIES:
        errors.append(f"Invalid severity. Must be one of: {', '.join(SEVERITIES)}")

    category = finding.get("category")
    if category and category not in CATEGORIES:
        errors.append(f"Invalid category. Must be one of: {', '.join(CATEGORIES)}")

    return FindingValidation(is_valid=not errors, errors=errors)


def validate_status(status: Any) -> bool:
    """Return whether ``status`` is an exact lifecycle status value."""
    return isinstance(status, str) and status in STATUSES
