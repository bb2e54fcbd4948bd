import re

from zkif.field.meta import fieldparams


class FieldParams:

    def __init__(self, field_name: str):
        if field_name not in fieldparams:
            raise KeyError(f'Unknown field "{field_name}", must be one of {list(fieldparams)}')
        self.field_name = field_name

    def __eq__(self, other):
        return isinstance(other, FieldParams) and self.field_name == other.field_name

    def __hash__(self):
        return self.field_name.__hash__()

    def __repr__(self):
        return f'FieldParams({self.field_name!r})'

    @property
    def identifier_name(self) -> str:
        return re.sub('[^a-zA-Z0-9$_]', '_', self.field_name).title()

    @property
    def modulus(self) -> int:
        return fieldparams[self.field_name]['modulus']

    @property
    def byte_width(self) -> int:
        """Width N of the canonical little-endian encoding of one element."""
        return fieldparams[self.field_name]['byte_width']

    @property
    def field_maximum(self) -> int:
        """Largest element (p - 1), written to statement headers as the field marker."""
        return self.modulus - 1


def find_field_by_maximum(field_maximum: int) -> FieldParams:
    """
    Look up the supported field whose largest element is field_maximum.

    :raise KeyError: if no supported field matches
    """
    for name, params in fieldparams.items():
        if params['modulus'] - 1 == field_maximum:
            return FieldParams(name)
    raise KeyError(f'No supported field with maximum 0x{field_maximum:x}')
