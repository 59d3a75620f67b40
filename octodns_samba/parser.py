#
#
#

"""Parsing of `samba-tool dns query` output.

Example output:

    Name=*, Records=1, Children=0
      CNAME: target.example.com (flags=600000f0, serial=123, ttl=3600)
      MX: mail.example.com. (10) (flags=f0, serial=0, ttl=900)

The format is not a versioned contract, so anything that does not look like
the above raises SambaParseError rather than being guessed at.
"""

import re

from .exceptions import SambaParseError
from .record import DEFAULT_TTL, DNSRecord
from .strategies import strategy_for

TTL_RE = re.compile(r'ttl=(\d+)')


def parse_query_output(output, server, zone, name, _type):
    _type = _type.upper()
    prefix = f'{_type}:'

    for line in output.splitlines():
        line = line.strip()
        if not line.startswith(prefix):
            continue

        after_type = line[len(prefix) :].strip()
        paren = after_type.find('(')
        if paren == -1:
            raise SambaParseError(f'unexpected output format: {line}')

        value = after_type[:paren].strip()
        value = strategy_for(_type).from_listing(value, after_type[paren:])

        ttl = DEFAULT_TTL
        match = TTL_RE.search(after_type)
        if match:
            ttl = int(match.group(1))

        return DNSRecord(
            server=server,
            zone=zone,
            name=name,
            type=_type,
            value=value,
            ttl=ttl,
        )

    raise SambaParseError(f'record type {_type} not found in output')
