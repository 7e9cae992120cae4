from .probe import ReachabilityProbePort
from .repos import CompaniesRepoPort, IntroductionsRepoPort

__all__ = [
    "ReachabilityProbePort",
    "CompaniesRepoPort",
    "IntroductionsRepoPort",
]
