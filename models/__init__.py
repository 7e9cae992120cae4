from .enums import (
    CompanyVerificationStatus,
    DomainVerdictStatus,
    HrRole,
    IntroductionStatus,
    ProfessionalVerificationStatus,
)
from .company_record import CompanyRecord
from .hr_partner_record import HrPartnerRecord
from .professional_record import ProfessionalRecord
from .introduction_policy import IntroductionPolicy
from .introduction_request import EFFECTIVE_STATUS_SQL, IntroductionRequest

__all__ = [
    "CompanyVerificationStatus",
    "DomainVerdictStatus",
    "HrRole",
    "IntroductionStatus",
    "ProfessionalVerificationStatus",
    "CompanyRecord",
    "HrPartnerRecord",
    "ProfessionalRecord",
    "IntroductionPolicy",
    "EFFECTIVE_STATUS_SQL",
    "IntroductionRequest",
]
