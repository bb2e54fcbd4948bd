"""
This module defines the zkif options which are configurable by the user via command line arguments.

The argument parser in :py:mod:`.__main__` uses the docstrings, type hints and _values for the help
 strings and the _values fields for autocompletion

WARNING: This module is imported before argcomplete.autocomplete is called. \
For performance reasons it should thus not have any import side-effects or perform any expensive operations during import.
"""
from typing import Any

from appdirs import AppDirs

from zkif.field.meta import fieldparams


def _check_is_one_of(val: str, legal_vals):
    if val not in legal_vals:
        raise ValueError(f'Invalid config value {val}, must be one of {legal_vals}')


def _type_check(val: Any, t):
    if not isinstance(val, t):
        raise ValueError(f'Value {val} has wrong type (expected {t})')


class UserConfig:
    def __init__(self):
        self._appdirs = AppDirs('zkif', appauthor=False, version=None, roaming=True)

        # User configuration
        # Each attribute must have a type hint and a docstring for correct help strings in the commandline interface.
        # If 'Available Options: [...]' is specified, the options are used for autocomplete suggestions.

        # Global defaults
        self._field: str = 'bls12-381'
        self._field_values = list(fieldparams.keys())

        self._constraints_chunk_size: int = 100000
        self._statement_name: str = 'zkif'

        self._log_dir: str = self._appdirs.user_log_dir
        self._verbosity: int = 1

    @property
    def field(self) -> str:
        """
        Prime field over which statements are built.

        Available Options: [bls12-381, bn128]
        """
        return self._field

    @field.setter
    def field(self, val: str):
        _check_is_one_of(val, self._field_values)
        self._field = val

    @property
    def constraints_chunk_size(self) -> int:
        """
        Maximum number of constraints per constraints message when producing a statement.

        Buffered constraints are flushed as one message as soon as this many have accumulated.
        """
        return self._constraints_chunk_size

    @constraints_chunk_size.setter
    def constraints_chunk_size(self, val: int):
        _type_check(val, int)
        if val <= 0:
            raise ValueError(f'Chunk size must be positive, got {val}')
        self._constraints_chunk_size = val

    @property
    def statement_name(self) -> str:
        """Default value of the "name" configuration entry in produced statement headers."""
        return self._statement_name

    @statement_name.setter
    def statement_name(self, val: str):
        _type_check(val, str)
        self._statement_name = val

    @property
    def log_dir(self) -> str:
        """Path to default log directory."""
        return self._log_dir

    @log_dir.setter
    def log_dir(self, val: str):
        _type_check(val, str)
        import os
        if not os.path.exists(val):
            os.makedirs(val)
        self._log_dir = val

    @property
    def verbosity(self) -> int:
        """
        If 0, no output
        If 1, normal output
        If 2, verbose output

        This includes for example the rows of validated constraint systems and per-call gadget statistics.
        """
        return self._verbosity

    @verbosity.setter
    def verbosity(self, val: int):
        _type_check(val, int)
        self._verbosity = val
