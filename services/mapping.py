from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from models.introduction_request import IntroductionRequest
from utils.timeutil import to_iso


def _iso(value: Optional[datetime]) -> Optional[str]:
    return to_iso(value) if value else None


def map_to_introduction_schema(requests: List[IntroductionRequest], now: datetime) -> List[Dict[str, Any]]:
    """Map request records to the external IntroductionRequest shape (inline, simple).

    `status` is the effective status at `now`; the stored value is kept as
    `storedStatus` for audit views.
    """
    mapped: List[Dict[str, Any]] = []
    for r in requests:
        mapped.append({
            'id': r.id,
            'companyId': r.company_id,
            'professionalId': r.professional_id,
            'sentById': r.sent_by_id,
            'jobRoleId': r.job_role_id,
            'status': r.effective_status(now).value,
            'storedStatus': r.status.value,
            'personalizedMessage': r.personalized_message,
            'matchScore': r.match_score,
            'sentAt': _iso(r.sent_at),
            'expiresAt': _iso(r.expires_at),
            'viewedByProfessional': bool(r.viewed_by_professional),
            'viewedAt': _iso(r.viewed_at),
            'respondedAt': _iso(r.responded_at),
            'responseMessage': r.response_message,
            'company': {'name': r.company_name, 'industry': r.industry} if r.company_name else None,
            'jobRole': {'title': r.role_title, 'locationCity': r.location_city} if r.role_title else None,
        })
    return mapped
