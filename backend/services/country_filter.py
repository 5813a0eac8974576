"""Country calling-code allow-list."""
from typing import Iterable


def is_allowed_country(phone_number: str, allowed_prefixes: Iterable[str]) -> bool:
    """
    Check whether a phone number starts with an allowed calling-code prefix.
    
    An empty allow-list disables the check and admits every number.
    """
    prefixes = tuple(allowed_prefixes)
    if not prefixes:
        return True
    return phone_number.startswith(prefixes)
