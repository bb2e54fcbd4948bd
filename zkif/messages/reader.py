from typing import List, Optional, Iterator, Tuple, Dict

from zkif.errors.exceptions import EncodingError
from zkif.messages.serialization import deserialize_stream
from zkif.messages.types import Message, CircuitHeader, ConstraintsMessage, WitnessMessage, BilinearConstraint
from zkif.utils.helpers import read_file

VariableValue = Tuple[int, Optional[bytes]]


class Messages:
    """
    A collection of received messages, read as one statement (or as one gadget response).

    Constraints are kept in message order, iterating them is lazy and can be repeated.
    """

    def __init__(self, msgs: Optional[List[Message]] = None):
        self.headers: List[CircuitHeader] = []
        self.constraint_messages: List[ConstraintsMessage] = []
        self.witness_messages: List[WitnessMessage] = []
        for m in msgs or []:
            self.push(m)

    def push(self, msg: Message):
        if isinstance(msg, CircuitHeader):
            self.headers.append(msg)
        elif isinstance(msg, ConstraintsMessage):
            self.constraint_messages.append(msg)
        elif isinstance(msg, WitnessMessage):
            self.witness_messages.append(msg)
        else:
            raise EncodingError(f'Unexpected message {msg!r}')

    def push_message(self, data: bytes):
        """Add all messages of a serialized message stream."""
        for m in deserialize_stream(data):
            self.push(m)

    def read_file(self, filename: str):
        self.push_message(read_file(filename))

    def header(self) -> Optional[CircuitHeader]:
        """The most recently received header."""
        return self.headers[-1] if self.headers else None

    def iter_constraints(self) -> Iterator[BilinearConstraint]:
        for msg in self.constraint_messages:
            yield from msg.constraints

    def num_constraints(self) -> int:
        return sum(len(m) for m in self.constraint_messages)

    def connection_variables(self) -> Optional[List[VariableValue]]:
        h = self.header()
        if h is None:
            return None
        return list(h.connections)

    def witness_values(self) -> Dict[int, bytes]:
        vals = {}
        for w in self.witness_messages:
            for var_id, val in w.assigned_variables:
                if val is not None:
                    vals[var_id] = val
        return vals

    def has_witness(self) -> bool:
        return any(w.assigned_variables.has_values() for w in self.witness_messages)

    def private_variables(self, first_local_id: int = 1) -> Optional[Iterator[VariableValue]]:
        """
        All ids in [first_local_id, free_variable_id) which are not connections, with their witness value if known.

        The ids are produced lazily, the declared range may be as large as the id space.

        :return: None if no header was received
        """
        h = self.header()
        if h is None:
            return None
        connected = set(h.connections.variable_ids)
        values = self.witness_values()
        return ((var_id, values.get(var_id)) for var_id in range(max(first_local_id, 1), h.free_variable_id)
                if var_id not in connected)

    def used_private_variables(self, first_local_id: int = 1) -> Optional[List[VariableValue]]:
        """
        Private variables in [first_local_id, free_variable_id) which have a witness value or appear in a constraint.

        Declared ids which are used nowhere are left out.

        :return: (id, value) pairs in id order, None if no header was received
        """
        h = self.header()
        if h is None:
            return None
        values = self.witness_values()
        used = set(values)
        for constraint in self.iter_constraints():
            used.update(constraint.variable_ids())
        used.difference_update(h.connections.variable_ids)
        first = max(first_local_id, 1)
        return [(var_id, values.get(var_id)) for var_id in sorted(used) if first <= var_id < h.free_variable_id]
