"""
CloudBox API services: blob/metadata reconciliation and checkout session creation.
"""

from .billing import BillingClient, PlanDescriptor
from .reconciliation import ReconciliationService, UploadPhase

__all__ = [
    'BillingClient', 'PlanDescriptor',
    'ReconciliationService', 'UploadPhase',
]
