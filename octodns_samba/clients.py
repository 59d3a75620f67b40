#
#
#

"""Protocol definitions for the command executor interface.

This module defines structural typing (PEP 544) for whatever runs
samba-tool, so the synchronizer can be driven by a fake in tests without
spawning processes.
"""

from typing import Optional, Protocol, Sequence


class CommandExecutor(Protocol):
    """Protocol for running one samba-tool command.

    SambaTool conforms to this interface; tests substitute deterministic
    stubs.
    """

    def run(
        self, arguments: Sequence[str], timeout: Optional[float] = None
    ) -> str:
        """Run samba-tool once and return its standard output.

        Args:
            arguments: samba-tool arguments, e.g. ['dns', 'query', ...].
                Authentication arguments are appended by the executor.
            timeout: Optional deadline in seconds for this invocation

        Returns:
            Captured standard output

        Raises:
            SambaToolError: On a non-zero exit, carrying the captured stderr
        """
        ...
