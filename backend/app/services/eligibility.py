"""
Eligibility Gate - hard domain filter between routing and extraction

Passes unconditionally when the user has no configured domain or holds the
administrative override; otherwise passes only when the routed primary
domain equals the user's configured domain. A secondary-domain match does
not pass the gate.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EligibilityResult:
    passed: bool
    job_domain: str
    user_domain: Optional[str] = None
    reason: Optional[str] = None


def check_eligibility(
    primary_domain: str,
    user_domain: Optional[str],
    has_override: bool = False,
) -> EligibilityResult:
    if not user_domain or has_override:
        return EligibilityResult(passed=True, job_domain=primary_domain, user_domain=user_domain)

    if primary_domain == user_domain:
        return EligibilityResult(passed=True, job_domain=primary_domain, user_domain=user_domain)

    return EligibilityResult(
        passed=False,
        job_domain=primary_domain,
        user_domain=user_domain,
        reason=(
            f"Domain mismatch: this job was routed to {primary_domain}, "
            f"but your profile domain is {user_domain}."
        ),
    )
