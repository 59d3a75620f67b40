#
#
#

import logging
import os

from octodns.provider.base import BaseProvider
from octodns.record import Record, Update

from .exceptions import (
    SambaConfigError,
    SambaException,
    SambaParseError,
    SambaRecordConflict,
    SambaRecordError,
    SambaRecordNotFound,
    SambaToolError,
    SambaUpdateError,
)
from .normalize import strip_trailing_dot
from .record import DNSRecord, build_id, parse_id
from .samba_tool import SambaTool
from .strategies import values_equivalent
from .sync import RecordSynchronizer

__version__ = '0.1.0'

__all__ = [
    'DNSRecord',
    'RecordSynchronizer',
    'SambaConfigError',
    'SambaException',
    'SambaParseError',
    'SambaProvider',
    'SambaRecordConflict',
    'SambaRecordError',
    'SambaRecordNotFound',
    'SambaTool',
    'SambaToolError',
    'SambaUpdateError',
    'build_id',
    'parse_id',
]

USERNAME_ENV = 'SAMBADNS_USERNAME'
PASSWORD_ENV = 'SAMBADNS_PASSWORD'


class SambaProvider(BaseProvider):
    """Manages records on a Samba AD DC through `samba-tool dns`.

    samba-tool cannot list a zone, so the provider only looks at the
    (name, type) keys it has been asked to manage: those of every desired
    zone planned through this instance. Each key holds a single value.
    """

    SUPPORTS_GEO = False
    SUPPORTS_DYNAMIC = False
    SUPPORTS_ROOT_NS = False
    SUPPORTS = set(('A', 'AAAA', 'CNAME', 'MX', 'NS', 'PTR', 'TXT'))

    def __init__(
        self,
        id,
        server,
        username=None,
        password=None,
        binary=None,
        timeout=None,
        *args,
        **kwargs,
    ):
        self.log = logging.getLogger(f'SambaProvider[{id}]')
        self.log.debug(
            '__init__: id=%s, server=%s, username=%s, password=***, '
            'binary=%s, timeout=%s',
            id,
            server,
            username,
            binary,
            timeout,
        )
        super().__init__(id, *args, **kwargs)

        if not server:
            raise SambaConfigError('server is required')
        self._server = server

        username = username or os.environ.get(USERNAME_ENV)
        password = password or os.environ.get(PASSWORD_ENV)
        self._tool = SambaTool(username, password, binary, timeout)
        self._sync = RecordSynchronizer(self._tool)

        # zone name -> {(name, _type)}
        self._managed = {}

    def _append_dot(self, value):
        if value == '@' or value[-1] == '.':
            return value
        return f'{value}.'

    def _samba_name(self, name):
        return name or '@'

    def _samba_zone(self, zone):
        return zone.name[:-1]

    def _key(self, record):
        return (
            self._server,
            self._samba_zone(record.zone),
            self._samba_name(record.name),
            record._type,
        )

    def _data_for_multiple(self, _type, record):
        return {
            'ttl': record.ttl,
            'type': _type,
            'values': [record.value],
        }

    _data_for_A = _data_for_multiple
    _data_for_AAAA = _data_for_multiple

    def _data_for_single(self, _type, record):
        return {
            'ttl': record.ttl,
            'type': _type,
            'value': self._append_dot(record.value),
        }

    _data_for_CNAME = _data_for_single
    _data_for_PTR = _data_for_single

    def _data_for_MX(self, _type, record):
        exchange, preference = record.value.rsplit(' ', 1)
        return {
            'ttl': record.ttl,
            'type': _type,
            'values': [
                {
                    'preference': int(preference),
                    'exchange': self._append_dot(exchange),
                }
            ],
        }

    def _data_for_NS(self, _type, record):
        return {
            'ttl': record.ttl,
            'type': _type,
            'values': [self._append_dot(record.value)],
        }

    def _data_for_TXT(self, _type, record):
        # "seg1","seg2" -> one octoDNS value
        segments = [s.strip().strip('"') for s in record.value.split(',')]
        return {
            'ttl': record.ttl,
            'type': _type,
            'values': [''.join(segments).replace(';', '\\;')],
        }

    def _params_for_multiple(self, record):
        for value in record.values:
            yield value

    _params_for_A = _params_for_multiple
    _params_for_AAAA = _params_for_multiple
    _params_for_NS = _params_for_multiple

    def _params_for_TXT(self, record):
        for value in record.values:
            yield value.replace('\\;', ';')

    def _params_for_single(self, record):
        yield record.value

    _params_for_CNAME = _params_for_single
    _params_for_PTR = _params_for_single

    def _params_for_MX(self, record):
        for value in record.values:
            yield f'{strip_trailing_dot(value.exchange)} {value.preference}'

    def _params_for(self, record):
        return list(getattr(self, f'_params_for_{record._type}')(record))

    def plan(self, desired, processors=[]):
        managed = self._managed.setdefault(desired.name, set())
        for record in desired.records:
            if record._type in self.SUPPORTS:
                managed.add((record.name, record._type))
        return super().plan(desired, processors=processors)

    def populate(self, zone, target=False, lenient=False):
        self.log.debug(
            'populate: name=%s, target=%s, lenient=%s',
            zone.name,
            target,
            lenient,
        )

        keys = self._managed.get(zone.name)
        if not keys:
            self.log.debug('populate:   no managed records for %s', zone.name)
            return False

        before = len(zone.records)
        for name, _type in sorted(keys):
            record = self._sync.query(
                self._server,
                self._samba_zone(zone),
                self._samba_name(name),
                _type,
            )
            if record is None:
                continue
            data_for = getattr(self, f'_data_for_{_type}')
            record = Record.new(
                zone,
                name,
                data_for(_type, record),
                source=self,
                lenient=lenient,
            )
            zone.add_record(record, lenient=lenient)

        found = len(zone.records) - before
        exists = found > 0
        self.log.info(
            'populate:   found %s records, exists=%s', found, exists
        )
        return exists

    def _process_desired_zone(self, desired):
        for record in desired.records:
            values = getattr(record, 'values', None)
            if values is None or len(values) < 2:
                continue
            msg = f'multiple values not supported for {record.fqdn}'
            fallback = f'managing only the first value ({values[0]})'
            self.supports_warn_or_except(msg, fallback)
            record = record.copy()
            record.values = values[:1]
            desired.add_record(record, replace=True)

        return super()._process_desired_zone(desired)

    def _include_change(self, change):
        if not isinstance(change, Update):
            return True
        existing = self._params_for(change.existing)
        new = self._params_for(change.new)
        if len(existing) == len(new) and all(
            values_equivalent(change.new._type, a, b)
            for a, b in zip(existing, new)
        ):
            # samba-tool dns add takes no ttl, only value changes count
            self.log.warning(
                '_include_change: ignoring change without value change for %s',
                change.new.fqdn,
            )
            return False
        return True

    def _apply_Create(self, change):
        new = change.new
        server, zone, name, _type = self._key(new)
        for value in self._params_for(new):
            self._sync.create(DNSRecord(server, zone, name, _type, value))

    def _apply_Update(self, change):
        new = change.new
        server, zone, name, _type = self._key(new)
        value = self._params_for(new)[0]
        self._sync.replace(server, zone, name, _type, value)

    def _apply_Delete(self, change):
        # delete what the server holds, its encoding may differ from ours
        current = self._sync.query(*self._key(change.existing))
        if current is None:
            self.log.debug(
                '_apply_Delete: %s already absent', change.existing.fqdn
            )
            return
        self._sync.delete(current)

    def _apply(self, plan):
        desired = plan.desired
        changes = plan.changes
        self.log.debug(
            '_apply: zone=%s, len(changes)=%d', desired.name, len(changes)
        )

        for change in changes:
            class_name = change.__class__.__name__
            getattr(self, f'_apply_{class_name}')(change)
