#
# Tests for the record synchronizer against an in-memory samba-tool
#

from unittest import TestCase
from unittest.mock import Mock

from fakes import ALREADY_EXISTS, FakeSambaTool

from octodns_samba.exceptions import (
    SambaParseError,
    SambaRecordConflict,
    SambaRecordError,
    SambaRecordNotFound,
    SambaToolError,
    SambaUpdateError,
)
from octodns_samba.record import DNSRecord
from octodns_samba.sync import RecordSynchronizer

SERVER = 'dc1.example.com'
ZONE = 'example.com'


def record(name, _type, value):
    return DNSRecord(SERVER, ZONE, name, _type, value)


class TestRecordSynchronizer(TestCase):
    def setUp(self):
        self.tool = FakeSambaTool()
        self.sync = RecordSynchronizer(self.tool)

    def test_create(self):
        self.sync.create(record('web', 'A', '192.168.1.100'))
        self.assertEqual(
            ['dns', 'add', SERVER, ZONE, 'web', 'A', '192.168.1.100'],
            self.tool.calls[0],
        )
        self.assertEqual(
            ('192.168.1.100', 3600),
            self.tool.records[(SERVER, ZONE, 'web', 'A')],
        )

    def test_create_is_idempotent(self):
        r = record('web', 'A', '192.168.1.100')
        self.sync.create(r)
        self.sync.create(r)
        self.assertEqual(['add', 'add', 'query'], self.tool.verbs())
        self.assertEqual(1, len(self.tool.records))

    def test_create_idempotent_with_equivalent_value(self):
        self.sync.create(record('www', 'CNAME', 'target.example.com.'))
        self.sync.create(record('www', 'CNAME', 'target.example.com'))
        self.sync.create(record('v6', 'AAAA', '2001:db8::1'))
        self.sync.create(
            record('v6', 'AAAA', '2001:0db8:0000:0000:0000:0000:0000:0001')
        )
        self.assertEqual(2, len(self.tool.records))

    def test_create_conflict(self):
        self.sync.create(record('web', 'A', '192.168.1.100'))
        with self.assertRaises(SambaRecordConflict) as ctx:
            self.sync.create(record('web', 'A', '192.168.1.200'))

        e = ctx.exception
        self.assertEqual('192.168.1.100', e.existing_value)
        self.assertIn('192.168.1.100', str(e))
        self.assertIn('192.168.1.200', str(e))
        self.assertIsInstance(e.__cause__, SambaToolError)
        # stored value untouched
        self.assertEqual(
            '192.168.1.100', self.sync.query(SERVER, ZONE, 'web', 'A').value
        )

    def test_create_other_failure(self):
        self.tool.fail_next['add'] = 'WERR_ACCESS_DENIED'
        with self.assertRaises(SambaRecordError) as ctx:
            self.sync.create(record('web', 'A', '192.168.1.100'))
        self.assertEqual('create', ctx.exception.verb)
        self.assertIn(f'{SERVER}/{ZONE}/web/A', str(ctx.exception))
        self.assertIn('WERR_ACCESS_DENIED', str(ctx.exception))
        self.assertEqual(['add'], self.tool.verbs())

    def test_create_conflict_with_nothing_stored(self):
        # add reports a clash but the record is gone by the time it is queried
        self.tool.fail_next['add'] = ALREADY_EXISTS
        with self.assertRaises(SambaRecordConflict) as ctx:
            self.sync.create(record('web', 'A', '192.168.1.100'))

        e = ctx.exception
        self.assertIsNone(e.existing_value)
        self.assertIn('None', str(e))
        self.assertIsInstance(e.__cause__, SambaToolError)
        self.assertEqual(['add', 'query'], self.tool.verbs())
        self.assertEqual({}, self.tool.records)

    def test_query_absent(self):
        self.assertIsNone(self.sync.query(SERVER, ZONE, 'nope', 'A'))

    def test_query_absent_markers(self):
        for stderr in (
            'WERR_DNS_ERROR_NAME_DOES_NOT_EXIST',
            'WERR_DNS_ERROR_RECORD_DOES_NOT_EXIST',
            'ERROR: Record does not exist',
        ):
            with self.subTest(stderr=stderr):
                self.tool.fail_next['query'] = stderr
                self.assertIsNone(self.sync.query(SERVER, ZONE, 'web', 'A'))

    def test_query_other_failure(self):
        self.tool.fail_next['query'] = 'NT_STATUS_LOGON_FAILURE'
        with self.assertRaises(SambaRecordError) as ctx:
            self.sync.query(SERVER, ZONE, 'web', 'a')
        self.assertEqual('query', ctx.exception.verb)
        self.assertEqual('A', ctx.exception.record.type)

    def test_query_unexpected_output(self):
        tool = Mock()
        tool.run.return_value = 'something else entirely\n'
        sync = RecordSynchronizer(tool)
        with self.assertRaises(SambaParseError):
            sync.query(SERVER, ZONE, 'web', 'A')

    def test_query_default_ttl(self):
        self.tool.omit_ttl = True
        self.sync.create(record('web', 'A', '192.168.1.100'))
        found = self.sync.query(SERVER, ZONE, 'web', 'A')
        self.assertEqual(3600, found.ttl)

    def test_query_mx_value_feeds_delete(self):
        self.sync.create(record('@', 'MX', 'mail.example.com 10'))
        found = self.sync.query(SERVER, ZONE, '@', 'MX')
        self.assertEqual('mail.example.com 10', found.value)
        self.sync.delete(found)
        self.assertEqual({}, self.tool.records)

    def test_lookup(self):
        with self.assertRaises(SambaRecordNotFound) as ctx:
            self.sync.lookup(SERVER, ZONE, 'web', 'a')
        self.assertIn('web A', str(ctx.exception))

        self.sync.create(record('web', 'A', '192.168.1.100'))
        self.assertEqual(
            '192.168.1.100', self.sync.lookup(SERVER, ZONE, 'web', 'A').value
        )

    def test_delete_is_idempotent(self):
        self.sync.delete(record('gone', 'A', '10.0.0.1'))
        self.assertEqual(['delete'], self.tool.verbs())

    def test_delete_other_failure(self):
        self.tool.fail_next['delete'] = 'NT_STATUS_ACCESS_DENIED'
        with self.assertRaises(SambaRecordError) as ctx:
            self.sync.delete(record('web', 'A', '10.0.0.1'))
        self.assertEqual('delete', ctx.exception.verb)

    def test_delete_txt_reencodes(self):
        stored = '"v=spf1","~all"'
        self.tool.records[(SERVER, ZONE, '@', 'TXT')] = (stored, 3600)
        self.sync.delete(record('@', 'TXT', stored))
        self.assertEqual("'v=spf1' '~all'", self.tool.calls[0][6])
        self.assertEqual({}, self.tool.records)

    def test_delete_single_txt_untouched(self):
        stored = '"hello world"'
        self.tool.records[(SERVER, ZONE, '@', 'TXT')] = (stored, 3600)
        self.sync.delete(record('@', 'TXT', stored))
        self.assertEqual(stored, self.tool.calls[0][6])

    def test_update(self):
        old = record('web', 'A', '192.168.1.100')
        self.sync.create(old)
        self.sync.update(old, old.with_value('192.168.1.101'))
        self.assertEqual(['add', 'delete', 'add'], self.tool.verbs())
        self.assertEqual(
            '192.168.1.101', self.sync.query(SERVER, ZONE, 'web', 'A').value
        )

    def test_update_delete_failure_skips_create(self):
        old = record('web', 'A', '192.168.1.100')
        self.sync.create(old)
        self.tool.fail_next['delete'] = 'NT_STATUS_ACCESS_DENIED'

        with self.assertRaises(SambaUpdateError) as ctx:
            self.sync.update(old, old.with_value('192.168.1.101'))

        self.assertEqual('delete', ctx.exception.phase)
        self.assertFalse(ctx.exception.record_absent)
        self.assertEqual(['add', 'delete'], self.tool.verbs())
        self.assertEqual(
            '192.168.1.100', self.sync.query(SERVER, ZONE, 'web', 'A').value
        )

    def test_update_create_failure_leaves_record_absent(self):
        old = record('web', 'A', '192.168.1.100')
        new = old.with_value('192.168.1.101')
        self.sync.create(old)
        self.tool.fail_next['add'] = 'NT_STATUS_CONNECTION_RESET'

        with self.assertRaises(SambaUpdateError) as ctx:
            self.sync.update(old, new)

        e = ctx.exception
        self.assertEqual('create', e.phase)
        self.assertTrue(e.record_absent)
        self.assertIn('record is absent', str(e))
        self.assertIsNone(self.sync.query(SERVER, ZONE, 'web', 'A'))

        # resuming only needs the create
        self.sync.create(new)
        self.assertEqual(
            '192.168.1.101', self.sync.query(SERVER, ZONE, 'web', 'A').value
        )

    def test_update_create_requery_unparseable(self):
        old = record('web', 'A', '10.0.0.1')
        self.sync.create(old)
        fake_run = self.tool.run

        def run(arguments, timeout=None):
            if arguments[1] == 'query':
                self.tool.calls.append(list(arguments))
                return 'unexpected\n'
            return fake_run(arguments, timeout)

        self.tool.run = Mock(side_effect=run)
        self.tool.fail_next['add'] = ALREADY_EXISTS

        with self.assertRaises(SambaUpdateError) as ctx:
            self.sync.update(old, old.with_value('10.0.0.2'))

        e = ctx.exception
        self.assertEqual('create', e.phase)
        self.assertTrue(e.record_absent)
        self.assertIsInstance(e.__cause__, SambaParseError)
        self.assertEqual(['add', 'delete', 'add', 'query'], self.tool.verbs())
        self.assertEqual({}, self.tool.records)

    def test_replace(self):
        # nothing stored yet, plain create
        self.sync.replace(SERVER, ZONE, '@', 'MX', 'mail.example.com 10')
        self.assertEqual(['query', 'add'], self.tool.verbs())

        # equivalent, nothing to do
        self.tool.calls = []
        self.sync.replace(SERVER, ZONE, '@', 'MX', 'mail.example.com 10')
        self.assertEqual(['query'], self.tool.verbs())

        # changed, delete what the server holds then create
        self.tool.calls = []
        self.sync.replace(SERVER, ZONE, '@', 'MX', 'mx2.example.com 20')
        self.assertEqual(['query', 'delete', 'add'], self.tool.verbs())
        self.assertEqual(
            ['dns', 'delete', SERVER, ZONE, '@', 'MX', 'mail.example.com 10'],
            self.tool.calls[1],
        )

    def test_end_to_end(self):
        self.tool.omit_ttl = True
        web = record('web', 'A', '192.168.1.100')

        self.sync.create(web)
        found = self.sync.query(SERVER, ZONE, 'web', 'A')
        self.assertEqual('192.168.1.100', found.value)
        self.assertEqual(3600, found.ttl)

        self.sync.update(found, web.with_value('192.168.1.101'))
        self.assertEqual(
            ['dns', 'delete', SERVER, ZONE, 'web', 'A', '192.168.1.100'],
            self.tool.calls[-2],
        )
        self.assertEqual(
            ['dns', 'add', SERVER, ZONE, 'web', 'A', '192.168.1.101'],
            self.tool.calls[-1],
        )
        found = self.sync.query(SERVER, ZONE, 'web', 'A')
        self.assertEqual('192.168.1.101', found.value)

        self.sync.delete(found)
        self.assertIsNone(self.sync.query(SERVER, ZONE, 'web', 'A'))

