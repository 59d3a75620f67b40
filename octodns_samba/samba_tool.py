#
#
#

import logging
import subprocess

from .exceptions import SambaConfigError, SambaToolError


class SambaTool(object):
    BINARY = 'samba-tool'

    def __init__(self, username, password, binary=None, timeout=None):
        if not username or not password:
            raise SambaConfigError('username and password are required')
        self.log = logging.getLogger('SambaTool')
        self._username = username
        self._password = password
        self._binary = binary or self.BINARY
        self._timeout = timeout

    def _auth_args(self):
        return ['-U', f'{self._username}%{self._password}']

    def run(self, arguments, timeout=None):
        arguments = list(arguments)
        if timeout is None:
            timeout = self._timeout
        # the auth pair is left out of anything that gets logged or raised
        command = ' '.join(arguments[:2])
        self.log.debug('run: %s, timeout=%s', ' '.join(arguments), timeout)

        try:
            result = subprocess.run(
                [self._binary] + arguments + self._auth_args(),
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            # partial output on timeout is bytes even in text mode
            stderr = e.stderr or ''
            if isinstance(stderr, bytes):
                stderr = stderr.decode(errors='replace')
            raise SambaToolError(
                command, f'timed out after {timeout}s', stderr
            ) from e
        except OSError as e:
            raise SambaToolError(command, str(e)) from e

        if result.returncode != 0:
            self.log.debug(
                'run: %s exited %d', command, result.returncode
            )
            raise SambaToolError(
                command, f'exit status {result.returncode}', result.stderr
            )

        return result.stdout
