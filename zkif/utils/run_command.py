import os
import subprocess
from typing import List, Optional, Tuple

from zkif.config import cfg


def run_command(cmd: List[str], cwd=None, stdin: Optional[bytes] = None) -> Tuple[bytes, str]:
    """
    Run arbitrary command.

    :param cmd: the command to run (list of command and arguments)
    :param cwd: if specified, use this path as working directory (otherwise current working directory is used)
    :param stdin: if specified, these bytes are written to the standard input of the command
    :raise SubprocessError: if the command exits with a non-zero status
    :return: raw command output and decoded error output
    """

    if cwd is not None:
        cwd = os.path.abspath(cwd)

    # run
    process = subprocess.Popen(cmd, stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE, cwd=cwd)

    # collect output
    output, error = process.communicate(input=stdin)

    # decode error output, stdout may carry binary messages
    error = error.decode('utf-8', errors='replace').rstrip()

    # check for error
    if process.returncode != 0:
        cmd = get_command(cmd)
        msg = f"Non-zero exit status {process.returncode} for command:\n{cwd}: $ {cmd}\n\n{error}"
        raise subprocess.SubprocessError(msg)
    elif cfg.verbosity >= 2 and not cfg.is_unit_test:
        print(f'Ran command {get_command(cmd)}:\n\n{error}')

    return output, error


def get_command(cmd: List[str]):
    def format_part(p: str):
        if ' ' in p:
            return f'"{p}"'
        else:
            return p

    str_command = " ".join(format_part(p) for p in cmd)
    return str_command
