from __future__ import annotations

from typing import Optional


def print_summary(stats: dict, company_name: Optional[str] = None) -> None:
    """Print the introduction statistics of one company."""
    print("\n" + "="*60)
    print("INTRODUCTION REQUESTS - SUMMARY")
    print("="*60)
    if company_name:
        print(f"Company: {company_name}")
    print(f"Total Sent: {stats.get('totalSent', 0)}")
    print()
    print("By Status:")
    print(f"  Pending: {stats.get('pending', 0)}")
    print(f"  Accepted: {stats.get('accepted', 0)}")
    print(f"  Declined: {stats.get('declined', 0)}")
    print(f"  Expired: {stats.get('expired', 0)}")
    print()
    print(f"Acceptance Rate: {stats.get('acceptanceRate', 0.0)}%")
    print(f"Average Response Time: {stats.get('averageResponseTime', 0.0)}h")
    print(f"This Month: {stats.get('thisMonth', 0)} (last month: {stats.get('lastMonth', 0)}, trend: {stats.get('trend', 'stable')})")
    print("="*60)
