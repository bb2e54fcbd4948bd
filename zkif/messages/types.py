"""
In-memory representation of the interchange messages.

A statement is a sequence of messages: any number of constraints batches, at most one witness batch
(proving only) and one header. Field values are kept as raw little-endian bytes here, conversion to
integers happens in :py:mod:`zkif.field.codec`.
"""
from typing import List, Optional, Iterator, Tuple


class Term:
    """One (variable id, coefficient bytes) pair of a linear combination."""

    def __init__(self, variable_id: int, value: bytes):
        self.variable_id = variable_id
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Term) and self.variable_id == other.variable_id and self.value == other.value

    def __hash__(self):
        return hash((self.variable_id, self.value))

    def __repr__(self):
        return f'Term({self.variable_id}, {self.value.hex()})'


class BilinearConstraint:
    """A row A * B = C, each side an ordered list of terms."""

    def __init__(self, linear_combination_a: List[Term], linear_combination_b: List[Term], linear_combination_c: List[Term]):
        self.linear_combination_a = linear_combination_a
        self.linear_combination_b = linear_combination_b
        self.linear_combination_c = linear_combination_c

    @property
    def linear_combinations(self) -> Tuple[List[Term], List[Term], List[Term]]:
        return self.linear_combination_a, self.linear_combination_b, self.linear_combination_c

    def variable_ids(self) -> Iterator[int]:
        for lc in self.linear_combinations:
            for term in lc:
                yield term.variable_id

    def __eq__(self, other):
        return isinstance(other, BilinearConstraint) and self.linear_combinations == other.linear_combinations

    def __repr__(self):
        return f'BilinearConstraint({self.linear_combination_a}, {self.linear_combination_b}, {self.linear_combination_c})'


class Variables:
    """
    Ordered variable ids with optional values.

    values is either None (shape only) or the concatenation of one element per id, all of the same width.
    """

    def __init__(self, variable_ids: Optional[List[int]] = None, values: Optional[bytes] = None):
        self.variable_ids = [] if variable_ids is None else variable_ids
        self.values = values

    def __len__(self):
        return len(self.variable_ids)

    def has_values(self) -> bool:
        return self.values is not None

    def value_width(self) -> int:
        if not self.variable_ids or self.values is None:
            return 0
        return len(self.values) // len(self.variable_ids)

    def get_value(self, idx: int) -> Optional[bytes]:
        if self.values is None:
            return None
        w = self.value_width()
        return self.values[idx * w:(idx + 1) * w]

    def __iter__(self) -> Iterator[Tuple[int, Optional[bytes]]]:
        for idx, var_id in enumerate(self.variable_ids):
            yield var_id, self.get_value(idx)

    def __eq__(self, other):
        return isinstance(other, Variables) and self.variable_ids == other.variable_ids and self.values == other.values

    def __repr__(self):
        vals = None if self.values is None else self.values.hex()
        return f'Variables({self.variable_ids}, {vals})'


class KeyValue:
    """Named configuration entry of a header."""

    def __init__(self, key: str, text: Optional[str] = None, data: Optional[bytes] = None, number: int = 0):
        self.key = key
        self.text = text
        self.data = data
        self.number = number

    def __eq__(self, other):
        return isinstance(other, KeyValue) and (self.key, self.text, self.data, self.number) == \
               (other.key, other.text, other.data, other.number)

    def __repr__(self):
        return f'KeyValue({self.key!r}, text={self.text!r}, data={self.data!r}, number={self.number})'


class Message:
    message_type: str = None


class CircuitHeader(Message):
    """
    Header of a statement, also used as gadget call and gadget return description.

    :param free_variable_id: smallest id not used by this statement
    :param connections: public inputs of a statement, or the inputs (and outputs) of a gadget call
    :param field_maximum: canonical encoding of p - 1, identifies the field
    :param configuration: named configuration entries
    """
    message_type = 'header'

    def __init__(self, free_variable_id: int, connections: Optional[Variables] = None,
                 field_maximum: Optional[bytes] = None, configuration: Optional[List[KeyValue]] = None):
        self.free_variable_id = free_variable_id
        self.connections = Variables() if connections is None else connections
        self.field_maximum = field_maximum
        self.configuration = configuration

    def get_config(self, key: str) -> Optional[KeyValue]:
        for kv in self.configuration or []:
            if kv.key == key:
                return kv
        return None

    def __eq__(self, other):
        return isinstance(other, CircuitHeader) and self.free_variable_id == other.free_variable_id and \
               self.connections == other.connections and self.field_maximum == other.field_maximum and \
               self.configuration == other.configuration

    def __repr__(self):
        return f'CircuitHeader({self.free_variable_id}, {self.connections}, {self.field_maximum!r}, {self.configuration})'


class ConstraintsMessage(Message):
    message_type = 'constraints'

    def __init__(self, constraints: Optional[List[BilinearConstraint]] = None):
        self.constraints = [] if constraints is None else constraints

    def __len__(self):
        return len(self.constraints)

    def __eq__(self, other):
        return isinstance(other, ConstraintsMessage) and self.constraints == other.constraints

    def __repr__(self):
        return f'ConstraintsMessage({len(self.constraints)} constraints)'


class WitnessMessage(Message):
    message_type = 'witness'

    def __init__(self, assigned_variables: Variables):
        self.assigned_variables = assigned_variables

    def __eq__(self, other):
        return isinstance(other, WitnessMessage) and self.assigned_variables == other.assigned_variables

    def __repr__(self):
        return f'WitnessMessage({self.assigned_variables})'
