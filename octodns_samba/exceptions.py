#
#
#

from octodns.provider import ProviderException

NOT_FOUND_MARKERS = (
    'WERR_DNS_ERROR_NAME_DOES_NOT_EXIST',
    'WERR_DNS_ERROR_RECORD_DOES_NOT_EXIST',
    'does not exist',
)
ALREADY_EXISTS_MARKER = 'already exist'


class SambaException(ProviderException):
    pass


class SambaConfigError(SambaException):
    pass


class SambaToolError(SambaException):
    """A non-zero exit (or failed launch) of samba-tool.

    `text` holds the failure and the captured stderr in one string; all
    classification is done against it.
    """

    def __init__(self, command, reason, stderr=''):
        self.command = command
        self.reason = reason
        self.stderr = stderr
        self.text = f'samba-tool error: {reason}, stderr: {stderr}'
        super().__init__(self.text)

    @property
    def not_found(self):
        return any(marker in self.text for marker in NOT_FOUND_MARKERS)

    @property
    def already_exists(self):
        return ALREADY_EXISTS_MARKER in self.text


class SambaParseError(SambaException):
    pass


class SambaRecordNotFound(SambaException):
    def __init__(self, server, zone, name, _type):
        super().__init__(
            f'record not found: {name} {_type} in zone {zone} on {server}'
        )


class SambaRecordConflict(SambaException):
    def __init__(self, record, existing_value):
        self.record = record
        self.existing_value = existing_value
        super().__init__(
            f'record {record.id} already exists with value '
            f'{existing_value!r}, requested {record.value!r}'
        )


class SambaRecordError(SambaException):
    def __init__(self, verb, record, cause):
        self.verb = verb
        self.record = record
        self.cause = cause
        super().__init__(f'failed to {verb} record {record.id}: {cause}')


class SambaUpdateError(SambaException):
    """Update is delete-then-create without rollback.

    With phase == 'create' the old record is already gone, so only the
    create needs retrying.
    """

    def __init__(self, phase, old, new, cause):
        self.phase = phase
        self.old = old
        self.new = new
        self.cause = cause
        if phase == 'delete':
            msg = (
                f'failed to delete old record {old.id} ({old.value!r}): '
                f'{cause}'
            )
        else:
            msg = (
                f'deleted {old.id} ({old.value!r}) but failed to create '
                f'{new.value!r}, record is absent: {cause}'
            )
        super().__init__(msg)

    @property
    def record_absent(self):
        return self.phase == 'create'
