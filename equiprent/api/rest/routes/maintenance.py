"""
Maintenance endpoints.

Provides:
- /maintenance/integrity - Machine/auxiliary link integrity report
- /maintenance/integrity/repair - Check and repair links
- /maintenance/orphans - Sweep unreferenced attachment objects
"""

from fastapi import APIRouter, Depends, Query

from equiprent.api.rest.dependencies import get_services
from equiprent.api.rest.models import IntegrityReportResponse, OrphanSweepResponse
from equiprent.application.factories import ServiceContainer

router = APIRouter(prefix="/api/v1/maintenance", tags=["Maintenance"])


@router.get("/integrity", response_model=IntegrityReportResponse)
def check_integrity(services: ServiceContainer = Depends(get_services)) -> IntegrityReportResponse:
    report = services.integrity_checker.check()
    return IntegrityReportResponse(**report.to_dict())


@router.post("/integrity/repair", response_model=IntegrityReportResponse)
def repair_integrity(services: ServiceContainer = Depends(get_services)) -> IntegrityReportResponse:
    report = services.integrity_checker.check_and_repair()
    return IntegrityReportResponse(**report.to_dict())


@router.post("/orphans", response_model=OrphanSweepResponse)
def sweep_orphans(
    dry_run: bool = Query(True),
    services: ServiceContainer = Depends(get_services),
) -> OrphanSweepResponse:
    orphans = services.orphan_cleaner.clean_orphans(dry_run=dry_run)
    return OrphanSweepResponse(dry_run=dry_run, orphans=orphans, count=len(orphans))
