#
#
#

"""Per-record-type value strategies.

samba-tool does not use one encoding for a value everywhere: MX comes back
from a query with the priority in a separate parenthesized group, TXT needs
different quoting to be deleted than it is listed with, and AAAA/CNAME/PTR
values may be written in more than one equivalent way. Each record type gets
one strategy object that knows its quirks, so the synchronizer and parser
never branch on the type themselves.
"""

import re
from typing import Protocol

from .exceptions import SambaParseError
from .normalize import format_txt_for_delete, normalize_ipv6, strip_trailing_dot


class ValueStrategy(Protocol):
    """Protocol for per-type value handling."""

    def canonical(self, value: str) -> str:
        """Return the form used to decide whether two values are the same."""
        ...

    def from_listing(self, value: str, remainder: str) -> str:
        """Turn a value read from `dns query` output into the tool encoding.

        Args:
            value: Text between the type prefix and the first '('
            remainder: Rest of the line, starting at that '('

        Raises:
            SambaParseError: If the listing does not have the expected shape
        """
        ...

    def for_delete(self, value: str) -> str:
        """Return the value as `dns delete` expects it."""
        ...


class PlainStrategy:
    """Values are compared and sent exactly as written."""

    def canonical(self, value):
        return value

    def from_listing(self, value, remainder):
        return value

    def for_delete(self, value):
        return value


class AddressStrategy(PlainStrategy):
    def canonical(self, value):
        return normalize_ipv6(value)


class HostnameStrategy(PlainStrategy):
    """FQDN targets, equal with or without the trailing dot."""

    def canonical(self, value):
        return strip_trailing_dot(value)


class MxStrategy(PlainStrategy):
    """MX is listed as `mail.example.com. (10) (flags=...)`.

    The first parenthesized group is taken as the priority and the value is
    reassembled as "<hostname> <priority>", which is what `dns delete`
    wants back.
    """

    PRIORITY_RE = re.compile(r'^\((\d+)\)')

    def from_listing(self, value, remainder):
        match = self.PRIORITY_RE.match(remainder.strip())
        if match is None:
            raise SambaParseError(
                f'MX priority not found in listing: {value} {remainder}'
            )
        return f'{strip_trailing_dot(value)} {match.group(1)}'


class TxtStrategy(PlainStrategy):
    def for_delete(self, value):
        if ',' in value:
            return format_txt_for_delete(value)
        return value


_plain = PlainStrategy()
_hostname = HostnameStrategy()

STRATEGIES = {
    'A': _plain,
    'AAAA': AddressStrategy(),
    'CNAME': _hostname,
    'MX': MxStrategy(),
    'NS': _plain,
    'PTR': _hostname,
    'SRV': _plain,
    'TXT': TxtStrategy(),
}


def strategy_for(_type):
    try:
        return STRATEGIES[_type.upper()]
    except KeyError:
        raise ValueError(f'no value strategy for record type {_type!r}')


def values_equivalent(_type, a, b):
    strategy = strategy_for(_type)
    return strategy.canonical(a) == strategy.canonical(b)
