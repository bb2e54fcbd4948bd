"""
Example gadgets, written against the wire protocol only.

They can be passed to :py:func:`zkif.gadget.bridge.call_gadget` directly or run as external gadget processes:
``python -m zkif.gadget.examples product`` reads a call from stdin and writes the response to stdout.
"""
import argparse
import sys
from typing import Callable, Dict, List, Optional

from zkif.errors.exceptions import EncodingError
from zkif.field.codec import FieldCodec
from zkif.field.params import FieldParams, find_field_by_maximum
from zkif.messages.reader import Messages
from zkif.messages.serialization import serialize_stream
from zkif.messages.types import CircuitHeader, BilinearConstraint, Term, Variables, ConstraintsMessage, WitnessMessage, \
    Message

# Coefficient one in the short wire form
ONE = b'\x01'


def _read_call(call: bytes) -> CircuitHeader:
    msgs = Messages()
    msgs.push_message(call)
    header = msgs.header()
    if header is None:
        raise EncodingError('Gadget call contains no header')
    return header


def _call_field(header: CircuitHeader) -> FieldParams:
    if header.field_maximum is None:
        from zkif.config import cfg
        return cfg.field_params
    return find_field_by_maximum(int.from_bytes(header.field_maximum, byteorder='little'))


def product_gadget(call: bytes) -> bytes:
    """
    Multiply all inputs: out = x_1 * x_2 * ... * x_n (n >= 2).

    Intermediate products are private variables, the final product is the only output.
    """
    header = _read_call(call)
    codec = FieldCodec(_call_field(header))
    ids = header.connections.variable_ids
    if len(ids) < 2:
        raise ValueError(f'product gadget needs at least two inputs, got {len(ids)}')
    proving = header.connections.has_values()
    values: List[Optional[int]] = codec.maybe_decode_values(header.connections.values, len(ids))

    free_variable_id = header.free_variable_id
    constraints = []
    private_ids, private_values = [], []
    acc_id, acc_val = ids[0], values[0]
    for x_id, x_val in zip(ids[1:], values[1:]):
        out_id = free_variable_id
        free_variable_id += 1
        out_val = acc_val * x_val % codec.modulus if proving else None
        constraints.append(BilinearConstraint([Term(acc_id, ONE)], [Term(x_id, ONE)], [Term(out_id, ONE)]))
        private_ids.append(out_id)
        private_values.append(out_val)
        acc_id, acc_val = out_id, out_val

    # The last product is the output, not a private variable
    private_ids.pop()
    private_values.pop()

    msgs: List[Message] = [ConstraintsMessage(constraints)]
    if proving and private_ids:
        msgs.append(WitnessMessage(Variables(private_ids, codec.encode_values(private_values))))
    out_values = codec.encode_values(values + [acc_val]) if proving else None
    msgs.append(CircuitHeader(free_variable_id, Variables(ids + [acc_id], out_values), header.field_maximum))
    return serialize_stream(msgs)


def square_gadget(call: bytes) -> bytes:
    """out = x * x for a single input x."""
    header = _read_call(call)
    if len(header.connections) != 1:
        raise ValueError(f'square gadget needs exactly one input, got {len(header.connections)}')
    x_id = header.connections.variable_ids[0]
    duplicated = Variables([x_id, x_id], None if header.connections.values is None else header.connections.values * 2)
    doubled_call = serialize_stream([CircuitHeader(header.free_variable_id, duplicated, header.field_maximum)])
    response = Messages()
    response.push_message(product_gadget(doubled_call))

    # Echo the single input instead of the duplicated one
    ret = response.header()
    conn = list(ret.connections)
    out_id, out_val = conn[2]
    values = None if out_val is None else conn[0][1] + out_val
    ret.connections = Variables([x_id, out_id], values)
    return serialize_stream(response.constraint_messages + response.witness_messages + [ret])


gadgets: Dict[str, Callable[[bytes], bytes]] = {
    'product': product_gadget,
    'square': square_gadget,
}


def main():
    parser = argparse.ArgumentParser(prog='zkif-gadget', description='Run an example gadget on a call read from stdin.')
    parser.add_argument('gadget', choices=sorted(gadgets.keys()))
    a = parser.parse_args()

    response = gadgets[a.gadget](sys.stdin.buffer.read())
    sys.stdout.buffer.write(response)
    sys.stdout.buffer.flush()


if __name__ == '__main__':
    main()
