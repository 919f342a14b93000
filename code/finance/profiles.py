from typing import Any, Dict

from .schemas import OrganizationProfile

DEFAULT_PROFILE = OrganizationProfile(quantity_multiplier=1.0, base_salary=60000.0, base_fixed_cost=300000.0)

ORGANIZATION_PROFILES: Dict[str, OrganizationProfile] = {
    "startup": OrganizationProfile(quantity_multiplier=1.2, base_salary=70000.0, base_fixed_cost=300000.0),
    "event": OrganizationProfile(quantity_multiplier=0.8, base_salary=60000.0, base_fixed_cost=200000.0),
}


def resolve_organization_profile(organization_type: Any = None) -> OrganizationProfile:
    """Map an organization type tag to its scaling constants.

    Missing, malformed or unknown tags fall through to the default row.
    """
    if not isinstance(organization_type, str):
        return DEFAULT_PROFILE
    return ORGANIZATION_PROFILES.get(organization_type, DEFAULT_PROFILE)


def organization_label(organization_type: Any = None) -> str:
    if isinstance(organization_type, str) and organization_type:
        return organization_type
    return "General"
