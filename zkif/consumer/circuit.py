from typing import Optional

from zkif import my_logging
from zkif.config import cfg, zkif_print, zkif_print_banner
from zkif.errors.exceptions import EncodingError, UnsatisfiedConstraint, IncompleteWitness
from zkif.field.codec import FieldCodec
from zkif.field.params import FieldParams, find_field_by_maximum
from zkif.messages.reader import Messages
from zkif.r1cs.constraint_system import ConstraintSystem
from zkif.r1cs.registry import VariableRegistry, Role
from zkif.r1cs.translator import enforce
from zkif.utils.timer import time_measure


class ZkifCircuit:
    """A circuit instance built from the messages of one statement."""

    def __init__(self, messages: Messages):
        self.messages = messages

    def field_params(self) -> FieldParams:
        """Field of the statement, taken from the header marker if present, otherwise from the configuration."""
        header = self.messages.header()
        if header is None:
            raise EncodingError('Statement has no header')
        if header.field_maximum is None:
            return cfg.field_params
        try:
            return find_field_by_maximum(int.from_bytes(header.field_maximum, byteorder='little'))
        except KeyError as e:
            raise EncodingError(str(e.args[0]))

    def synthesize(self, registry: VariableRegistry, proving: Optional[bool] = None):
        """
        Allocate the public inputs and the used private variables in the host system of registry and enforce all
        constraints, in order.

        :param registry: registry of the (fresh) host system
        :param proving: if true, every variable must have a value; by default proving iff a witness was received
        :raise IncompleteWitness: if proving and a value is missing
        """
        codec = FieldCodec(registry.cs.params)
        if proving is None:
            proving = self.messages.has_witness()

        def value_of(var_id: int, val: Optional[bytes]) -> Optional[int]:
            if val is None:
                if proving:
                    raise IncompleteWitness(f'No value for variable {var_id}', var_id)
                return None
            return codec.decode(val)

        with time_measure('synthesize'):
            for var_id, val in self.messages.connection_variables():
                if var_id == 0 or var_id in registry:
                    raise EncodingError(f'Public variable id {var_id} is reserved or declared twice')
                registry.adopt(var_id, Role.PUBLIC, value_of(var_id, val), f'public_{var_id}')

            # declared ids which are used nowhere (e.g. gadget connection aliases) get no host variable
            for var_id, val in self.messages.used_private_variables():
                registry.adopt(var_id, Role.PRIVATE, value_of(var_id, val), f'private_{var_id}')
            registry.counter.advance_past(self.messages.header().free_variable_id - 1)

            for idx, constraint in enumerate(self.messages.iter_constraints()):
                enforce(constraint, registry, f'constraint_{idx}', codec)

        my_logging.data('synthesized_constraints', registry.cs.num_constraints)


def synthesize(messages: Messages, proving: Optional[bool] = None) -> ConstraintSystem:
    """Build a fresh host constraint system from messages."""
    circuit = ZkifCircuit(messages)
    cs = ConstraintSystem(circuit.field_params())
    registry = VariableRegistry(cs)
    circuit.synthesize(registry, proving)
    return cs


def validate(messages: Messages, print_cs: bool = False) -> ConstraintSystem:
    """
    Check that the witness of a statement satisfies all of its constraints.

    :param messages: the statement, including its witness
    :param print_cs: if true, print all rows of the synthesized system
    :raise UnsatisfiedConstraint: if a constraint is violated
    :raise IncompleteWitness: if a value is missing
    :return: the synthesized constraint system
    """
    cs = synthesize(messages, proving=True)

    if print_cs:
        zkif_print_banner('Constraint system')
        zkif_print(cs.pretty_print())

    unsatisfied = cs.which_is_unsatisfied()
    if unsatisfied is not None:
        my_logging.warning(f'Unsatisfied constraint: {unsatisfied}')
        raise UnsatisfiedConstraint(f'The witness does not satisfy the constraints (first violated: {unsatisfied})', unsatisfied)
    my_logging.info(f'Statement satisfied ({cs.num_constraints} constraints)')
    return cs
