from subprocess import SubprocessError
from typing import List, Optional

from zkif import my_logging
from zkif.errors.exceptions import GadgetFailure
from zkif.utils.run_command import run_command, get_command


class CommandGadget:
    """
    Gadget implemented by an external executable.

    The serialized call is written to the standard input of the command, the response is read from its standard output.
    """

    def __init__(self, cmd: List[str], cwd: Optional[str] = None):
        self.cmd = cmd
        self.cwd = cwd

    def __call__(self, call: bytes) -> bytes:
        my_logging.debug(f'Running gadget command {get_command(self.cmd)}')
        try:
            output, _ = run_command(self.cmd, cwd=self.cwd, stdin=call)
        except (SubprocessError, OSError) as e:
            raise GadgetFailure(f'Gadget command failed: {e}') from e
        return output

    def __repr__(self):
        return f'CommandGadget({get_command(self.cmd)!r})'
