import sys

from parameterized import parameterized

from zkif.errors.exceptions import UnknownVariable, IdMismatch, GadgetFailure, IncompleteWitness, EncodingError
from zkif.field.codec import FieldCodec
from zkif.field.params import FieldParams
from zkif.gadget.bridge import call_gadget, GadgetCall
from zkif.gadget.command import CommandGadget
from zkif.gadget.examples import product_gadget, square_gadget, ONE
from zkif.messages.reader import Messages
from zkif.messages.serialization import serialize_stream
from zkif.messages.types import CircuitHeader, ConstraintsMessage, BilinearConstraint, Term, Variables, WitnessMessage
from zkif.r1cs.constraint_system import ConstraintSystem, VariableKind
from zkif.r1cs.registry import VariableRegistry, Role
from zkif.tests.zkif_unit_test import ZkifTestCase


def read_call(call: bytes) -> CircuitHeader:
    msgs = Messages()
    msgs.push_message(call)
    return msgs.header()


def response_gadget(constraints, connections=None, free_offset=1, witness=None):
    """Gadget which echoes its inputs, declares one output (zero when proving) and returns the given constraints."""
    def gadget(call: bytes) -> bytes:
        header = read_call(call)
        ids = header.connections.variable_ids
        out = header.free_variable_id
        if connections is None:
            values = header.connections.values
            conn = Variables(ids + [out], None if values is None else values + bytes(len(values) // len(ids)))
        else:
            conn = connections(ids, out)
        msgs = [ConstraintsMessage(constraints(ids, out))]
        if witness is not None:
            msgs.append(WitnessMessage(witness(ids, out)))
        msgs.append(CircuitHeader(out + free_offset, conn))
        return serialize_stream(msgs)
    return gadget


class TestCallGadget(ZkifTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.params = FieldParams('bls12-381')
        self.codec = FieldCodec(self.params)
        self.cs = ConstraintSystem(self.params)
        self.registry = VariableRegistry(self.cs)
        self.a_id = self.registry.allocate(Role.PRIVATE, 2, 'a')
        self.b_id = self.registry.allocate(Role.PRIVATE, 5, 'b')
        self.a = self.registry.resolve(self.a_id)
        self.b = self.registry.resolve(self.b_id)

    def _state(self):
        return (self.registry.free_variable_id, len(self.registry), self.cs.num_inputs, self.cs.num_aux,
                self.cs.num_constraints)

    def assert_rolled_back(self, gadget, exc_type, inputs=None):
        before = self._state()
        with self.assertRaises(exc_type) as ctx:
            call_gadget(self.registry, [self.a, self.b] if inputs is None else inputs, gadget)
        self.assertEqual(self._state(), before)
        self.assertEqual(self.registry.reverse(self.a), self.a_id)
        self.assertEqual(self.registry.reverse(self.b), self.b_id)
        return ctx.exception

    def test_product(self):
        self.assertEqual(self.registry.free_variable_id, 3)
        outputs = call_gadget(self.registry, [self.a, self.b], product_gadget)

        self.assertEqual(len(outputs), 1)
        c = outputs[0]
        self.assertEqual(self.cs.get_value(c), 10)
        self.assertEqual(self.cs.num_constraints, 1)
        self.assertEqual(self.registry.free_variable_id, 6)
        self.assertEqual(self.registry.reverse(self.a), self.a_id)
        self.assertEqual(self.registry.reverse(self.b), self.b_id)
        self.assertEqual(self.registry.reverse(c), 5)
        self.assertTrue(self.cs.is_satisfied())

    def test_call_message(self):
        calls = []

        def spy(call: bytes) -> bytes:
            calls.append(read_call(call))
            return product_gadget(call)

        call_gadget(self.registry, [self.a, self.b], spy)
        header = calls[0]
        self.assertEqual(header.connections.variable_ids, [3, 4])
        self.assertEqual(header.free_variable_id, 5)
        self.assertEqual(self.codec.maybe_decode_values(header.connections.values, 2), [2, 5])
        self.assertEqual(header.field_maximum, self.codec.encode(self.params.modulus - 1))

    def test_output_annotations(self):
        c, = call_gadget(self.registry, [self.a, self.b], product_gadget, name='mul')
        self.assertEqual(self.cs.get_annotation(c), 'mul/output_5')
        self.assertEqual(self.cs.constraints[-1].annotation, 'mul/constraint_0')

    def test_public_output(self):
        c, = call_gadget(self.registry, [self.a, self.b], product_gadget, output_role=Role.PUBLIC)
        self.assertEqual(c.kind, VariableKind.INPUT)
        self.assertEqual(self.cs.get_value(c), 10)

    def test_private_variables(self):
        d = self.registry.resolve(self.registry.allocate(Role.PRIVATE, 4, 'd'))
        c, = call_gadget(self.registry, [self.a, self.b, d], product_gadget, name='mul')
        # inputs 4, 5, 6; intermediate product 7; output 8
        self.assertEqual(self.cs.get_value(c), 40)
        self.assertEqual(self.registry.reverse(c), 8)
        self.assertEqual(self.cs.get_value(self.registry.resolve(7)), 10)
        self.assertEqual(self.cs.get_annotation(self.registry.resolve(7)), 'mul/local_7')
        self.assertEqual(self.cs.num_constraints, 2)
        self.assertEqual(self.registry.free_variable_id, 9)
        self.assertTrue(self.cs.is_satisfied())

    def test_square(self):
        c, = call_gadget(self.registry, [self.b], square_gadget)
        self.assertEqual(self.cs.get_value(c), 25)
        self.assertTrue(self.cs.is_satisfied())

    def test_setup_mode(self):
        x = self.registry.resolve(self.registry.allocate(Role.PRIVATE))
        y = self.registry.resolve(self.registry.allocate(Role.PRIVATE))
        c, = call_gadget(self.registry, [x, y], product_gadget)
        self.assertIsNone(self.cs.get_value(c))
        self.assertEqual(self.cs.num_constraints, 1)

    def test_forced_setup_mode(self):
        calls = []

        def spy(call: bytes) -> bytes:
            calls.append(read_call(call))
            return product_gadget(call)

        c, = call_gadget(self.registry, [self.a, self.b], spy, proving=False)
        self.assertFalse(calls[0].connections.has_values())
        self.assertIsNone(self.cs.get_value(c))

    def test_successive_calls(self):
        c, = call_gadget(self.registry, [self.a, self.b], product_gadget)
        d, = call_gadget(self.registry, [c, self.a], product_gadget)
        self.assertEqual(self.cs.get_value(d), 20)
        self.assertEqual(self.registry.free_variable_id, 9)
        self.assertTrue(self.cs.is_satisfied())

    def test_unknown_variable(self):
        gadget = response_gadget(lambda ids, out: [
            BilinearConstraint([Term(ids[0], ONE)], [Term(ids[1], ONE)], [Term(out, ONE)]),
            BilinearConstraint([Term(out, ONE)], [Term(0, ONE)], [Term(out + 40, ONE)]),
        ])
        e = self.assert_rolled_back(gadget, UnknownVariable)
        self.assertEqual(e.variable_id, 45)

    def test_host_variable_not_passed_to_gadget(self):
        # only b is an input, a exists in the host but is not part of the call
        gadget = response_gadget(lambda ids, out: [
            BilinearConstraint([Term(self.a_id, ONE)], [Term(0, ONE)], [Term(out, ONE)]),
        ])
        e = self.assert_rolled_back(gadget, UnknownVariable, inputs=[self.b])
        self.assertEqual(e.variable_id, self.a_id)

    def test_unused_declared_ids_are_skipped(self):
        def huge_span(call: bytes) -> bytes:
            msgs = Messages()
            msgs.push_message(product_gadget(call))
            msgs.header().free_variable_id = (1 << 64) - 1
            return serialize_stream(msgs.constraint_messages + msgs.witness_messages + msgs.headers)

        c, = call_gadget(self.registry, [self.a, self.b], huge_span)
        self.assertEqual(self.cs.get_value(c), 10)
        self.assertEqual(self.registry.free_variable_id, 6)
        self.assertEqual(self.cs.num_aux, 3)

    def test_wrong_echo(self):
        gadget = response_gadget(lambda ids, out: [], connections=lambda ids, out: Variables([ids[1], ids[0], out]))
        e = self.assert_rolled_back(gadget, IdMismatch)
        self.assertEqual(e.expected, [3, 4])
        self.assertEqual(e.actual, [4, 3])

    def test_missing_echo(self):
        gadget = response_gadget(lambda ids, out: [], connections=lambda ids, out: Variables([out]))
        self.assert_rolled_back(gadget, IdMismatch)

    @parameterized.expand([
        ('below_free_id', lambda ids, out: Variables(ids + [1])),
        ('input_as_output', lambda ids, out: Variables(ids + [ids[0]])),
        ('duplicate', lambda ids, out: Variables(ids + [out, out])),
    ])
    def test_invalid_output_id(self, _, connections):
        self.assert_rolled_back(response_gadget(lambda ids, out: [], connections=connections), IdMismatch)

    def test_missing_output_value(self):
        gadget = response_gadget(lambda ids, out: [
            BilinearConstraint([Term(ids[0], ONE)], [Term(ids[1], ONE)], [Term(out, ONE)]),
        ], connections=lambda ids, out: Variables(ids + [out]))
        e = self.assert_rolled_back(gadget, IncompleteWitness)
        self.assertEqual(e.variable_id, 5)

    def test_missing_private_value(self):
        # private variable 6 is referenced but has no witness value
        def connections(ids, out):
            return Variables(ids + [out], self.codec.encode_values([2, 5, 10]))
        gadget = response_gadget(lambda ids, out: [
            BilinearConstraint([Term(out + 1, ONE)], [Term(0, ONE)], [Term(out, ONE)]),
        ], connections=connections, free_offset=2)
        e = self.assert_rolled_back(gadget, IncompleteWitness)
        self.assertEqual(e.variable_id, 6)

    def test_private_from_witness(self):
        def connections(ids, out):
            return Variables(ids + [out], self.codec.encode_values([2, 5, 10]))
        gadget = response_gadget(lambda ids, out: [], connections=connections, free_offset=2,
                                 witness=lambda ids, out: Variables([out + 1], self.codec.encode(7)))
        call_gadget(self.registry, [self.a, self.b], gadget)
        self.assertEqual(self.cs.get_value(self.registry.resolve(6)), 7)
        self.assertEqual(self.registry.free_variable_id, 7)

    def test_partial_input_values(self):
        x = self.registry.resolve(self.registry.allocate(Role.PRIVATE))
        self.assert_rolled_back(product_gadget, IncompleteWitness, inputs=[self.a, x])

    def test_forced_proving_without_values(self):
        x = self.registry.resolve(self.registry.allocate(Role.PRIVATE))
        y = self.registry.resolve(self.registry.allocate(Role.PRIVATE))
        with self.assertRaises(IncompleteWitness):
            call_gadget(self.registry, [x, y], product_gadget, proving=True)

    def test_gadget_exception(self):
        def failing(call: bytes) -> bytes:
            raise RuntimeError('boom')
        e = self.assert_rolled_back(failing, GadgetFailure)
        self.assertIsInstance(e.__cause__, RuntimeError)

    def test_gadget_rejects_input(self):
        # product needs two inputs
        self.assert_rolled_back(product_gadget, GadgetFailure, inputs=[self.a])

    def test_not_bytes(self):
        self.assert_rolled_back(lambda call: 'response', GadgetFailure)

    @parameterized.expand([
        ('garbage', b'\x00\x01 not json'),
        ('no_header', serialize_stream([ConstraintsMessage([])])),
        ('empty', b''),
    ])
    def test_malformed_response(self, _, response):
        self.assert_rolled_back(lambda call: response, EncodingError)

    def test_invalid_coefficient(self):
        gadget = response_gadget(lambda ids, out: [
            BilinearConstraint([Term(ids[0], b'\xff' * 32)], [Term(ids[1], ONE)], [Term(out, ONE)]),
        ], connections=lambda ids, out: Variables(ids + [out], self.codec.encode_values([2, 5, 10])))
        self.assert_rolled_back(gadget, EncodingError)

    def test_failure_after_successful_call(self):
        c, = call_gadget(self.registry, [self.a, self.b], product_gadget)
        before = self._state()
        with self.assertRaises(GadgetFailure):
            call_gadget(self.registry, [c], lambda call: None)
        self.assertEqual(self._state(), before)
        self.assertEqual(self.registry.reverse(c), 5)


class TestGadgetCall(ZkifTestCase):

    def test_to_message(self):
        codec = FieldCodec(FieldParams('bn128'))
        call = GadgetCall([3, 4], [1, 2], 5)
        self.assertTrue(call.proving)
        header = call.to_message(codec)
        self.assertEqual(header.free_variable_id, 5)
        self.assertEqual(header.connections, Variables([3, 4], codec.encode_values([1, 2])))
        self.assertEqual(header.field_maximum, codec.encode(codec.modulus - 1))

    def test_setup(self):
        call = GadgetCall([3], None, 4)
        self.assertFalse(call.proving)
        self.assertIsNone(call.to_message(FieldCodec(FieldParams('bn128'))).connections.values)


class TestCommandGadget(ZkifTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.cs = ConstraintSystem(FieldParams('bls12-381'))
        self.registry = VariableRegistry(self.cs)
        self.a = self.registry.resolve(self.registry.allocate(Role.PRIVATE, 6))
        self.b = self.registry.resolve(self.registry.allocate(Role.PRIVATE, 7))

    def test_external_product(self):
        gadget = CommandGadget([sys.executable, '-m', 'zkif.gadget.examples', 'product'])
        c, = call_gadget(self.registry, [self.a, self.b], gadget)
        self.assertEqual(self.cs.get_value(c), 42)
        self.assertTrue(self.cs.is_satisfied())

    def test_command_fails(self):
        gadget = CommandGadget([sys.executable, '-c', 'import sys; sys.exit(3)'])
        with self.assertRaises(GadgetFailure):
            call_gadget(self.registry, [self.a, self.b], gadget)
        self.assertEqual(self.registry.free_variable_id, 3)
        self.assertEqual(self.cs.num_constraints, 0)

    def test_missing_executable(self):
        with self.assertRaises(GadgetFailure):
            call_gadget(self.registry, [self.a, self.b], CommandGadget(['zkif-no-such-gadget']))
