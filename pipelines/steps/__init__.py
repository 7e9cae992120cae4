# Namespace for pipeline steps
from .reconcile_expired import ReconcileExpiredRequests  # noqa: F401
from .verify_companies import LoadPendingCompanies, VerifyAndPersistCompanies  # noqa: F401
