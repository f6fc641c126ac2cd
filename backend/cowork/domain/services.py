"""
Customer Directory

Case-insensitive substring search over the customer list the staff panel
already has loaded. A linear filter; there is no index behind it.
"""

from typing import Iterable, List, Optional, Protocol


class _Searchable(Protocol):
    name: str
    email: str


def matches_search(customer: _Searchable, term: Optional[str]) -> bool:
    """True if ``term`` occurs in the customer's name or email, ignoring case."""
    if not term:
        return True
    needle = term.lower()
    return needle in (customer.name or "").lower() or needle in (customer.email or "").lower()


def filter_customers(customers: Iterable[_Searchable], term: Optional[str]) -> List[_Searchable]:
    """Customers matching ``term``, in their original order."""
    return [c for c in customers if matches_search(c, term)]
