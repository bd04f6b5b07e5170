"""Default scanning regions for each cached Google Cloud collection."""

from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

DEFAULT_LOCATION = "global"

DEFAULT_REGIONS: Mapping[str, Tuple[str, ...]] = {
    "metrics": (DEFAULT_LOCATION,),
    "alertPolicies": (DEFAULT_LOCATION,),
}


def regions_for(collection: str, overrides: Sequence[str] | None = None) -> List[str]:
    """Return the regions a rule driven by ``collection`` should fan out over.

    Explicit ``overrides`` win; duplicates are dropped while keeping order.
    """

    candidates = overrides if overrides else DEFAULT_REGIONS.get(collection, (DEFAULT_LOCATION,))

    regions: List[str] = []
    for region in candidates:
        region = region.strip()
        if region and region not in regions:
            regions.append(region)
    return regions


__all__ = ["DEFAULT_LOCATION", "DEFAULT_REGIONS", "regions_for"]
