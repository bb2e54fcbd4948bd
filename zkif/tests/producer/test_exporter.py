import os
import tempfile

from zkif.config import cfg
from zkif.consumer.circuit import validate
from zkif.errors.exceptions import IncompleteWitness, UnsatisfiedConstraint, GadgetFailure
from zkif.field.codec import FieldCodec
from zkif.field.params import FieldParams
from zkif.gadget.examples import product_gadget
from zkif.messages.builder import MemorySink, FileSink
from zkif.messages.reader import Messages
from zkif.messages.types import Term, KeyValue
from zkif.producer.exporter import StatementExporter
from zkif.r1cs.constraint_system import LinearCombination
from zkif.tests.zkif_unit_test import ZkifTestCase


class TestStatementExporter(ZkifTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.codec = FieldCodec(FieldParams('bls12-381'))

    def _square(self, sink, proving, x=3, y=None):
        exporter = StatementExporter(sink, proving, field='bls12-381')
        x_var = exporter.alloc_input('x', x)
        y_var = exporter.alloc('y', (lambda: exporter.get_value(x_var) ** 2) if y is None else y)
        lc_x = LinearCombination([(x_var, 1)])
        exporter.enforce('x * x = y', lc_x, lc_x, LinearCombination([(y_var, 1)]))
        return exporter, x_var, y_var

    def test_square(self):
        sink = MemorySink()
        exporter, x_var, y_var = self._square(sink, True)
        header = exporter.finish('square')
        msgs = Messages(sink.messages)

        x_id, y_id = exporter.var_id(x_var), exporter.var_id(y_var)
        self.assertEqual((x_id, y_id), (1, 2))
        constraints = list(msgs.iter_constraints())
        self.assertEqual(len(constraints), 1)
        one = self.codec.encode(1)
        self.assertEqual(constraints[0].linear_combination_a, [Term(x_id, one)])
        self.assertEqual(constraints[0].linear_combination_b, [Term(x_id, one)])
        self.assertEqual(constraints[0].linear_combination_c, [Term(y_id, one)])
        self.assertEqual(self.codec.decode(msgs.witness_values()[y_id]), 9)

        self.assertEqual(header.free_variable_id, 3)
        self.assertEqual(msgs.connection_variables(), [(x_id, self.codec.encode(3))])
        self.assertEqual(header.get_config('name'), KeyValue('name', text='square'))
        self.assertEqual(self.codec.decode(header.field_maximum), self.codec.modulus - 1)
        self.assertIs(sink.messages[-1], header)

        validate(msgs)

    def test_setup(self):
        sink = MemorySink()
        exporter, _, _ = self._square(sink, False)
        header = exporter.finish()
        msgs = Messages(sink.messages)
        self.assertFalse(msgs.has_witness())
        self.assertIsNone(header.connections.values)
        self.assertEqual(msgs.num_constraints(), 1)
        self.assertEqual(header.get_config('name').text, cfg.statement_name)

    def test_missing_value(self):
        exporter = StatementExporter(MemorySink(), True)
        with self.assertRaises(IncompleteWitness):
            exporter.alloc('y')

    def test_wrong_witness(self):
        sink = MemorySink()
        exporter, _, _ = self._square(sink, True, y=10)
        exporter.finish()
        with self.assertRaises(UnsatisfiedConstraint) as ctx:
            validate(Messages(sink.messages))
        self.assertEqual(ctx.exception.annotation, 'constraint_0')

    def test_configuration(self):
        sink = MemorySink()
        exporter, _, _ = self._square(sink, False)
        header = exporter.finish('square', [KeyValue('comment', text='x * x = y'), KeyValue('level', number=3)])
        self.assertEqual([kv.key for kv in header.configuration], ['name', 'comment', 'level'])
        self.assertEqual(header.get_config('level').number, 3)

    def test_expose(self):
        sink = MemorySink()
        exporter, _, y_var = self._square(sink, True)
        y_pub = exporter.expose(y_var)
        exporter.finish()
        msgs = Messages(sink.messages)
        self.assertEqual(exporter.get_value(y_pub), 9)
        self.assertEqual([var_id for var_id, _ in msgs.connection_variables()], [1, 3])
        self.assertEqual(msgs.num_constraints(), 2)
        validate(msgs)

    def test_chunked_output(self):
        sink = MemorySink()
        exporter = StatementExporter(sink, True, field='bn128', chunk_size=2)
        acc = exporter.alloc_input('x', 2)
        for i in range(5):
            nxt = exporter.alloc(f'x^{i + 2}', lambda: exporter.get_value(acc) * 2)
            exporter.enforce(f'double_{i}', LinearCombination([(acc, 2)]), LinearCombination([(exporter.one(), 1)]),
                             LinearCombination([(nxt, 1)]))
            acc = nxt
        exporter.finish()
        msgs = Messages(sink.messages)
        self.assertEqual([len(m) for m in msgs.constraint_messages], [2, 2, 1])
        self.assertEqual(exporter.get_value(acc), 64)
        cs = validate(msgs)
        self.assertEqual(cs.params, FieldParams('bn128'))

    def test_gadget(self):
        sink = MemorySink()
        exporter = StatementExporter(sink, True)
        a = exporter.alloc('a', 2)
        b = exporter.alloc('b', 5)
        d = exporter.alloc('d', 4)
        out, = exporter.call_gadget([a, b, d], product_gadget, name='mul')
        self.assertEqual(exporter.get_value(out), 40)
        pub = exporter.expose(out)
        header = exporter.finish()

        msgs = Messages(sink.messages)
        # a, b, d, 3 connection aliases, intermediate, output, public copy
        self.assertEqual(header.free_variable_id, 10)
        self.assertEqual(exporter.var_id(pub), 9)
        self.assertEqual(sorted(msgs.witness_values().keys()), [1, 2, 3, 7, 8])
        self.assertEqual(msgs.num_constraints(), 3)
        cs = validate(msgs)
        self.assertEqual(cs.num_constraints, 3)

    def test_gadget_setup(self):
        sink = MemorySink()
        exporter = StatementExporter(sink, False)
        a = exporter.alloc('a')
        b = exporter.alloc('b')
        exporter.call_gadget([a, b], product_gadget)
        exporter.finish()
        msgs = Messages(sink.messages)
        self.assertFalse(msgs.has_witness())
        self.assertEqual(msgs.num_constraints(), 1)

    def test_failed_gadget(self):
        sink = MemorySink()
        exporter, x_var, y_var = self._square(sink, True)

        def failing(call: bytes) -> bytes:
            raise RuntimeError('boom')

        with self.assertRaises(GadgetFailure):
            exporter.call_gadget([x_var, y_var], failing)
        header = exporter.finish()
        self.assertEqual(header.free_variable_id, 3)
        validate(Messages(sink.messages))

    def test_file_sink(self):
        with tempfile.TemporaryDirectory() as d:
            sink = FileSink(d)
            exporter = StatementExporter(sink, True, chunk_size=1)
            x = exporter.alloc_input('x', 3)
            lc_x = LinearCombination([(x, 1)])
            for i in range(3):
                y = exporter.alloc(f'y{i}', 9)
                exporter.enforce(f'c{i}', lc_x, lc_x, LinearCombination([(y, 1)]))
            exporter.finish()

            files = sink.written_files()
            self.assertEqual([os.path.basename(f) for f in files],
                             ['constraints_0.zkif', 'constraints_1.zkif', 'constraints_2.zkif', 'witness.zkif',
                              'header.zkif'])
            msgs = Messages()
            for f in files:
                msgs.read_file(f)
            self.assertEqual(msgs.num_constraints(), 3)
            validate(msgs)
