#
#
#

from dataclasses import dataclass, replace

RECORD_TYPES = ('A', 'AAAA', 'CNAME', 'TXT', 'MX', 'PTR', 'SRV', 'NS')
DEFAULT_TTL = 3600


def build_id(server, zone, name, _type):
    return f'{server}/{zone}/{name}/{_type.upper()}'


def parse_id(id):
    """Split a composite id back into (server, zone, name, type).

    Zones or names containing '/' do not survive the round trip.
    """
    parts = id.split('/', 3)
    if len(parts) != 4:
        raise ValueError(
            f'invalid ID format: {id} (expected server/zone/name/type)'
        )
    return tuple(parts)


@dataclass(frozen=True)
class DNSRecord:
    """A single record as samba-tool sees it.

    `value` is kept in the tool's own encoding (e.g. MX as
    "<hostname> <priority>") so a queried record can be handed straight back
    to delete.
    """

    server: str
    zone: str
    name: str
    type: str
    value: str = ''
    ttl: int = DEFAULT_TTL

    def __post_init__(self):
        _type = self.type.upper()
        if _type not in RECORD_TYPES:
            raise ValueError(
                f'unsupported record type {self.type!r}, '
                f'must be one of {", ".join(RECORD_TYPES)}'
            )
        if self.ttl < 0:
            raise ValueError(f'invalid ttl {self.ttl}')
        object.__setattr__(self, 'type', _type)

    @property
    def id(self):
        return build_id(self.server, self.zone, self.name, self.type)

    def with_value(self, value):
        return replace(self, value=value)
