"""
Calls to external gadgets.

A gadget is any callable which maps a serialized call message to a serialized message stream. The call is a header
whose connections are the (fresh) input ids, with values in proving mode. The response must contain a header whose
connections start with the echoed input ids, followed by the output ids, the gadget's constraints and, when proving,
a witness message with the values of its private variables.
The private variables are the ids between the two free variable ids which occur in the witness or in a constraint.
The returned constraints may only reference the constant one, the inputs, the outputs and these private variables.

The host sees either all of a call's effects or none of them: if anything fails, the registry (including its id
counter) and the host constraint system are restored to their state before the call.
"""
from typing import Callable, List, Optional, Sequence

from zkif import my_logging
from zkif.errors.exceptions import GadgetFailure, IdMismatch, IncompleteWitness, EncodingError, UnknownVariable
from zkif.field.codec import FieldCodec
from zkif.messages.reader import Messages
from zkif.messages.serialization import serialize
from zkif.messages.types import CircuitHeader, Variables
from zkif.my_logging.log_context import log_context
from zkif.r1cs.constraint_system import Variable
from zkif.r1cs.registry import VariableRegistry, Role
from zkif.r1cs.translator import enforce
from zkif.utils.timer import time_measure

Gadget = Callable[[bytes], bytes]


class GadgetCall:
    """
    Interface description of one gadget call.

    :param input_ids: contiguous ids assigned to the inputs
    :param input_values: input values (proving mode) or None (setup mode)
    :param free_variable_id: first id the gadget may use for its own variables
    """

    def __init__(self, input_ids: List[int], input_values: Optional[List[int]], free_variable_id: int):
        self.input_ids = input_ids
        self.input_values = input_values
        self.free_variable_id = free_variable_id

    @property
    def proving(self) -> bool:
        return self.input_values is not None

    def to_message(self, codec: FieldCodec) -> CircuitHeader:
        values = None if self.input_values is None else codec.encode_values(self.input_values)
        return CircuitHeader(self.free_variable_id, Variables(list(self.input_ids), values),
                             codec.encode(codec.params.field_maximum))


def _select_mode(registry: VariableRegistry, inputs: Sequence[Variable], proving: Optional[bool]) -> Optional[List[int]]:
    values = [registry.cs.get_value(h) for h in inputs]
    have_values = [v is not None for v in values]
    if proving is None:
        if not inputs or not any(have_values):
            return None
        proving = True
    elif not proving:
        return None

    for h, ok in zip(inputs, have_values):
        if not ok:
            raise IncompleteWitness(f'Gadget input {h} has no value')
    return values


def _invoke(gadget: Gadget, call: bytes) -> bytes:
    try:
        response = gadget(call)
    except GadgetFailure:
        raise
    except Exception as e:
        raise GadgetFailure(f'Gadget failed: {e}') from e
    if not isinstance(response, (bytes, bytearray)):
        raise GadgetFailure(f'Gadget returned {type(response).__name__} instead of bytes')
    return bytes(response)


def call_gadget(registry: VariableRegistry, inputs: Sequence[Variable], gadget: Gadget, *,
                proving: Optional[bool] = None, output_role: Role = Role.PRIVATE, name: str = 'gadget') -> List[Variable]:
    """
    Call gadget on inputs and merge its variables and constraints into the host system of registry.

    :param registry: registry of the statement which is being built
    :param inputs: host variables passed to the gadget
    :param gadget: the gadget function
    :param proving: force setup (False) or proving (True) mode, by default proving iff the inputs have values
    :param output_role: role of the host variables allocated for the gadget outputs
    :param name: prefix for the annotations of the merged variables and constraints
    :raise GadgetFailure: if the gadget fails
    :raise IdMismatch: if the response does not echo the input ids or declares ids below the call's free variable id
    :raise UnknownVariable: if a returned constraint references an id which is not part of the call
    :raise IncompleteWitness: if a value is missing in proving mode
    :raise EncodingError: if the response is malformed
    :return: host variables of the gadget outputs, in response order
    """
    cs = registry.cs
    codec = FieldCodec(cs.params)
    input_values = _select_mode(registry, inputs, proving)

    reg_cp = registry.checkpoint()
    cs_cp = cs.checkpoint()
    try:
        with log_context(name), time_measure('gadget_call'):
            input_ids = [registry.connect(h) for h in inputs]
            call = GadgetCall(input_ids, input_values, registry.free_variable_id)
            my_logging.debug(f'Calling {name} with inputs {input_ids} ({"proving" if call.proving else "setup"}), '
                             f'free variable id {call.free_variable_id}')

            messages = Messages()
            messages.push_message(_invoke(gadget, serialize(call.to_message(codec))))
            outputs = _merge_response(registry, call, messages, codec, output_role, name)

        added = registry.free_variable_id - reg_cp.free_variable_id
        my_logging.info(f'{name}: merged {cs.num_constraints - cs_cp.num_constraints} constraints, {added} variable ids')
        my_logging.data(f'{name}_constraints', cs.num_constraints - cs_cp.num_constraints)
        return outputs
    except Exception as e:
        registry.rollback(reg_cp)
        cs.rollback(cs_cp)
        my_logging.warning(f'{name} failed, rolled back to free variable id {reg_cp.free_variable_id}: {e}')
        raise


def _merge_response(registry: VariableRegistry, call: GadgetCall, messages: Messages, codec: FieldCodec,
                    output_role: Role, name: str) -> List[Variable]:
    header = messages.header()
    if header is None:
        raise EncodingError(f'Response of {name} contains no header')

    # Validate interface before touching the host
    n = len(call.input_ids)
    connections = list(header.connections)
    echoed = [var_id for var_id, _ in connections[:n]]
    if echoed != call.input_ids:
        raise IdMismatch(f'{name} echoed input ids {echoed}, expected {call.input_ids}', call.input_ids, echoed)

    outputs = connections[n:]
    seen = set()
    for var_id, _ in outputs:
        if var_id < call.free_variable_id or var_id in seen:
            raise IdMismatch(f'{name} declared invalid output id {var_id} (free variable id {call.free_variable_id})',
                             call.input_ids, echoed)
        seen.add(var_id)

    def value_of(var_id: int, val: Optional[bytes]) -> Optional[int]:
        if not call.proving:
            return None
        if val is None:
            raise IncompleteWitness(f'{name} returned no value for variable {var_id}', var_id)
        return codec.decode(val)

    output_vars = []
    for var_id, val in outputs:
        output_vars.append(registry.adopt(var_id, output_role, value_of(var_id, val), f'{name}/output_{var_id}'))

    # Only the constant, the call interface and the gadget's own variables are visible to its constraints
    scope = {0, *call.input_ids, *seen}
    for var_id, val in messages.used_private_variables(first_local_id=call.free_variable_id):
        registry.adopt(var_id, Role.PRIVATE, value_of(var_id, val), f'{name}/local_{var_id}')
        scope.add(var_id)

    for idx, constraint in enumerate(messages.iter_constraints()):
        for var_id in constraint.variable_ids():
            if var_id not in scope:
                raise UnknownVariable(f'{name} constraint {idx} references variable {var_id}, which is not part of the call',
                                      var_id)
        enforce(constraint, registry, f'{name}/constraint_{idx}', codec)

    return output_vars
