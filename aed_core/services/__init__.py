# =============================================================================
# aed_core/services/__init__.py
# Service Layer for the AED inventory
# Separates inspector workflows and dashboard metrics from the data layer
# =============================================================================
"""
Service Layer for the AED inventory

Usage Example:
-------------
    from aed_core.services import InspectionService, KpiService

    # Log a monthly check (queued automatically when offline)
    inspections = InspectionService()
    result = await inspections.record_monthly_check(
        "CU-AED-002", "Derek Haase", "Fail - Needs Attention", "Battery indicator red."
    )
    if not result.success:
        print(result.error)

    # Dashboard numbers and the service list
    kpis = await KpiService().compute_dashboard()
    print(f"{kpis.service_required} of {kpis.total_aeds} AEDs need service")
"""

from .base_service import BaseService, ServiceResult
from .inspection_service import InspectionService, monthly_check_title
from .kpi_service import DashboardKPIs, KpiService, count_recent_checks, inventory_frame

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Inspections
    "InspectionService",
    "monthly_check_title",
    # Dashboard
    "DashboardKPIs",
    "KpiService",
    "count_recent_checks",
    "inventory_frame",
]
