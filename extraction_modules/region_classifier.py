"""
Region Classifier - decides which memory regions are worth reading

Only committed memory holds data. Private committed regions with any
readable protection are heap/stack/user allocations; small mapped regions
may hold shared buffers. Image-backed regions (module code and resources)
are never scanned.
"""

from typing import Optional

from .models import (
    CandidateRegion, RegionDescriptor,
    RATIONALE_PRIVATE, RATIONALE_MAPPED,
)
from .winapi import (
    MEM_PRIVATE, MEM_MAPPED,
    PAGE_READONLY, PAGE_READWRITE, PAGE_EXECUTE_READ, PAGE_EXECUTE_READWRITE,
)

MAPPED_REGION_LIMIT = 10 * 1024 * 1024  # 10MB

USER_DATA_PROTECTIONS = (
    PAGE_READWRITE,
    PAGE_READONLY,
    PAGE_EXECUTE_READ,
    PAGE_EXECUTE_READWRITE,
)


def has_user_data_protection(protect: int) -> bool:
    return any(protect & prot for prot in USER_DATA_PROTECTIONS)


def classify_region(
    region: RegionDescriptor,
    mapped_size_limit: int = MAPPED_REGION_LIMIT
) -> Optional[CandidateRegion]:
    """
    Classify a region

    Args:
        region: Region reported by the enumerator
        mapped_size_limit: Mapped regions at or above this size are skipped

    Returns:
        CandidateRegion when the region should be scanned, None to skip it
    """
    if not region.is_committed:
        return None

    if region.region_type == MEM_PRIVATE:
        if has_user_data_protection(region.protect):
            return CandidateRegion(region, RATIONALE_PRIVATE)
        return None

    if region.region_type == MEM_MAPPED:
        if region.region_size < mapped_size_limit:
            return CandidateRegion(region, RATIONALE_MAPPED)
        return None

    return None


def should_scan(region: RegionDescriptor, mapped_size_limit: int = MAPPED_REGION_LIMIT) -> bool:
    return classify_region(region, mapped_size_limit) is not None
