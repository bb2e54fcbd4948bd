import json
import os
from contextlib import contextmanager
from typing import Dict, Any, ContextManager

from zkif.config_user import UserConfig
from zkif.config_version import Versions
from zkif.field.params import FieldParams


def zkif_print(*args, verbosity_level=1, **kwargs):
    if (verbosity_level <= cfg.verbosity) and not cfg.is_unit_test:
        print(*args, **kwargs)


def zkif_print_banner(title: str):
    l = len(title) + 4
    zkif_print(f'{"#"*l}\n# {title} #\n{"#"*l}\n')


class Config(UserConfig):
    def __init__(self):
        super().__init__()

        # Internal values

        self._options_with_effect_on_statement_output = [
            'field', 'constraints_chunk_size', 'statement_name',
        ]

        self._is_unit_test = False

    def _load_cfg_file_if_exists(self, filename):
        if os.path.exists(filename):
            with open(filename) as conf:
                try:
                    self.override_defaults(json.load(conf))
                except ValueError as e:
                    raise ValueError(f'{e} (in file "{filename}")')

    def load_configuration_from_disk(self, local_cfg_file: str):
        # Load global configuration file
        global_config_dir = self._appdirs.site_config_dir
        global_cfg_file = os.path.join(global_config_dir, 'config.json')
        self._load_cfg_file_if_exists(global_cfg_file)

        # Load user configuration file
        user_config_dir = self._appdirs.user_config_dir
        user_cfg_file = os.path.join(user_config_dir, 'config.json')
        self._load_cfg_file_if_exists(user_cfg_file)

        # Load local configuration file
        self._load_cfg_file_if_exists(local_cfg_file)

    def override_defaults(self, overrides: Dict[str, Any]):
        for arg, val in overrides.items():
            if not hasattr(self, arg):
                raise ValueError(f'Tried to override non-existing config value {arg}')
            try:
                setattr(self, arg, val)
            except ValueError as e:
                raise ValueError(f'{e} (for entry "{arg}")')

    def export_statement_settings(self) -> dict:
        out = {}
        for k in self._options_with_effect_on_statement_output:
            out[k] = getattr(self, k)
        return out

    def import_statement_settings(self, vals: dict):
        for k in vals:
            if k not in self._options_with_effect_on_statement_output:
                raise KeyError(f'vals contains unknown option "{k}"')
            setattr(self, k, vals[k])

    @contextmanager
    def field_environment(self, field: str) -> ContextManager:
        """Temporarily build statements over a different field."""
        old_field = self.field
        self.field = field
        try:
            yield
        finally:
            self.field = old_field

    @property
    def zkif_version(self) -> str:
        """zkif version number"""
        return Versions.ZKIF_VERSION

    @property
    def wire_format_version(self) -> str:
        """Version stamped into every written message"""
        return Versions.WIRE_FORMAT_VERSION

    @property
    def field_params(self) -> FieldParams:
        return FieldParams(self.field)

    @property
    def header_file_name(self) -> str:
        return 'header.zkif'

    @property
    def witness_file_name(self) -> str:
        return 'witness.zkif'

    def get_constraints_file_name(self, chunk_idx: int) -> str:
        return f'constraints_{chunk_idx}.zkif'

    @property
    def is_unit_test(self) -> bool:
        return self._is_unit_test

    @is_unit_test.setter
    def is_unit_test(self, val: bool):
        self._is_unit_test = val


cfg = Config()
