#
#
#

"""Record synchronization on top of samba-tool.

Every operation is a fresh, blocking samba-tool invocation (two for a create
that has to check an existing record), and nothing is cached between calls.
Whether a record exists is always re-derived by querying the server.
"""

import logging

from .clients import CommandExecutor
from .exceptions import (
    SambaException,
    SambaRecordConflict,
    SambaRecordError,
    SambaRecordNotFound,
    SambaToolError,
    SambaUpdateError,
)
from .parser import parse_query_output
from .record import DNSRecord
from .strategies import strategy_for, values_equivalent


class RecordSynchronizer(object):
    def __init__(self, tool: CommandExecutor):
        self.log = logging.getLogger('RecordSynchronizer')
        self._tool = tool

    def create(self, record):
        """Create `record`, succeeding if an equivalent value is already there.

        Raises:
            SambaRecordConflict: If the key holds a different value
            SambaRecordError: On any other samba-tool failure
            SambaParseError: If the re-query after a clash is unreadable
        """
        self.log.debug('create: %s value=%s', record.id, record.value)
        args = [
            'dns',
            'add',
            record.server,
            record.zone,
            record.name,
            record.type,
            record.value,
        ]
        try:
            self._tool.run(args)
        except SambaToolError as e:
            if not e.already_exists:
                raise SambaRecordError('create', record, e) from e
            existing = self.query(
                record.server, record.zone, record.name, record.type
            )
            if existing is not None and values_equivalent(
                record.type, existing.value, record.value
            ):
                self.log.debug('create:   %s already present', record.id)
                return
            raise SambaRecordConflict(
                record, existing.value if existing else None
            ) from e

    def query(self, server, zone, name, _type):
        """Return the record stored under the key, or None if there is none."""
        _type = _type.upper()
        self.log.debug(
            'query: server=%s, zone=%s, name=%s, type=%s',
            server,
            zone,
            name,
            _type,
        )
        args = ['dns', 'query', server, zone, name, _type]
        try:
            output = self._tool.run(args)
        except SambaToolError as e:
            if e.not_found:
                return None
            raise SambaRecordError(
                'query', DNSRecord(server, zone, name, _type), e
            ) from e
        return parse_query_output(output, server, zone, name, _type)

    def lookup(self, server, zone, name, _type):
        """Like query, for callers that require the record to exist."""
        record = self.query(server, zone, name, _type)
        if record is None:
            raise SambaRecordNotFound(server, zone, name, _type.upper())
        return record

    def delete(self, record):
        """Delete `record`; a record that is already gone is not an error."""
        value = strategy_for(record.type).for_delete(record.value)
        self.log.debug('delete: %s value=%s', record.id, value)
        args = [
            'dns',
            'delete',
            record.server,
            record.zone,
            record.name,
            record.type,
            value,
        ]
        try:
            self._tool.run(args)
        except SambaToolError as e:
            if e.not_found:
                self.log.debug('delete:   %s already absent', record.id)
                return
            raise SambaRecordError('delete', record, e) from e

    def update(self, old, new):
        """Replace `old` with `new` by deleting and then creating.

        This is not atomic. If the create fails the old record stays deleted
        and SambaUpdateError.record_absent is set; retry the create alone.
        """
        self.log.debug('update: %s %s -> %s', old.id, old.value, new.value)
        try:
            self.delete(old)
        except SambaRecordError as e:
            raise SambaUpdateError('delete', old, new, e) from e
        try:
            self.create(new)
        except SambaException as e:
            self.log.warning(
                'update: %s deleted but create failed, record is absent',
                old.id,
            )
            raise SambaUpdateError('create', old, new, e) from e

    def replace(self, server, zone, name, _type, value):
        """Make the key hold `value`, deleting whatever is stored there now.

        The value deleted is the one a fresh query returns, in the encoding
        the server holds it in (e.g. MX as "<hostname> <priority>").
        """
        new = DNSRecord(server, zone, name, _type, value)
        current = self.query(server, zone, name, _type)
        if current is None:
            self.create(new)
            return
        if values_equivalent(new.type, current.value, value):
            self.log.debug('replace: %s unchanged', new.id)
            return
        self.update(current, new)
