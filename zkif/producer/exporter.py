from typing import Callable, List, Optional, Sequence, Union

from zkif import my_logging
from zkif.config import cfg
from zkif.errors.exceptions import IncompleteWitness
from zkif.field.codec import FieldCodec
from zkif.field.params import FieldParams
from zkif.gadget.bridge import Gadget, call_gadget
from zkif.messages.builder import Sink, StatementBuilder
from zkif.messages.types import CircuitHeader, KeyValue, Variables
from zkif.producer.chunker import ConstraintChunker
from zkif.r1cs.constraint_system import ConstraintSystem, LinearCombination, Constraint, Variable, VariableKind
from zkif.r1cs.registry import VariableCounter, VariableRegistry, Role
from zkif.r1cs.translator import to_wire

ValueArg = Union[None, int, Callable[[], int]]


class StatementExporter:
    """
    Build a circuit in a host constraint system and write it as a statement.

    Every variable gets a wire id when it is allocated, every enforced constraint is translated and queued for
    writing immediately. :py:meth:`finish` must be called to write the witness (when proving) and the header.

    :param sink: destination of the messages
    :param proving: if true, every allocation needs a value and a witness message is written
    :param field: field name (defaults to cfg.field)
    :param chunk_size: maximum number of constraints per message (defaults to cfg.constraints_chunk_size)
    """

    def __init__(self, sink: Sink, proving: bool, field: Optional[str] = None, chunk_size: Optional[int] = None):
        self.params = cfg.field_params if field is None else FieldParams(field)
        self.codec = FieldCodec(self.params)
        self.proving = proving

        self.cs = ConstraintSystem(self.params)
        counter = VariableCounter()
        self.registry = VariableRegistry(self.cs, counter)
        self.builder = StatementBuilder(sink, counter)
        self.chunker = ConstraintChunker(self.builder, chunk_size)
        self.witness_ids: List[int] = []

    @staticmethod
    def one() -> Variable:
        return ConstraintSystem.one()

    def _value(self, value: ValueArg, annotation: str) -> Optional[int]:
        if not self.proving:
            return None
        if callable(value):
            value = value()
        if value is None:
            raise IncompleteWitness(f'No value for "{annotation}"')
        return value % self.params.modulus

    def get_value(self, var: Variable) -> Optional[int]:
        return self.cs.get_value(var)

    def var_id(self, var: Variable) -> int:
        return self.registry.reverse(var)

    def alloc_input(self, annotation: str, value: ValueArg = None) -> Variable:
        """Allocate a public input, its value becomes part of the header."""
        val = self._value(value, annotation)
        var_id = self.builder.allocate_instance_var(None if val is None else self.codec.encode(val))
        return self.registry.adopt(var_id, Role.PUBLIC, val, annotation)

    def alloc(self, annotation: str, value: ValueArg = None) -> Variable:
        """Allocate a private variable, its value becomes part of the witness."""
        val = self._value(value, annotation)
        var_id = self.builder.allocate_var()
        self.witness_ids.append(var_id)
        return self.registry.adopt(var_id, Role.PRIVATE, val, annotation)

    def enforce(self, annotation: str, a: LinearCombination, b: LinearCombination, c: LinearCombination):
        """Add the constraint a * b = c."""
        constraint = Constraint(annotation, a, b, c)
        wire = to_wire(constraint, self.registry, self.codec)
        self.cs.enforce(annotation, a, b, c)
        self.chunker.push(wire)

    def expose(self, var: Variable, annotation: Optional[str] = None) -> Variable:
        """Make the value of var a public input (var * 1 = input)."""
        if annotation is None:
            annotation = f'{self.cs.get_annotation(var)}/public'
        pub = self.alloc_input(annotation, lambda: self.get_value(var))
        self.enforce(f'{annotation}/eq', LinearCombination([(var, 1)]), LinearCombination([(self.one(), 1)]),
                     LinearCombination([(pub, 1)]))
        return pub

    def call_gadget(self, inputs: Sequence[Variable], gadget: Gadget, name: str = 'gadget') -> List[Variable]:
        """
        Call an external gadget and include its constraints and private variables in the statement.

        :return: private host variables holding the gadget outputs
        """
        reg_cp = self.registry.checkpoint()
        cs_cp = self.cs.checkpoint()
        outputs = call_gadget(self.registry, inputs, gadget, proving=self.proving, name=name)

        for var_id in self.registry.ids_since(reg_cp):
            handle = self.registry.resolve(var_id)
            if handle.kind == VariableKind.AUX and handle.index >= cs_cp.num_aux:
                self.witness_ids.append(var_id)
        for constraint in self.cs.constraints[cs_cp.num_constraints:]:
            self.chunker.push(to_wire(constraint, self.registry, self.codec))
        return outputs

    def witness(self) -> Optional[Variables]:
        if not self.proving:
            return None
        values = [self.cs.get_value(self.registry.resolve(var_id)) for var_id in self.witness_ids]
        return Variables(list(self.witness_ids), self.codec.encode_values(values))

    def finish(self, name: Optional[str] = None, configuration: Optional[List[KeyValue]] = None) -> CircuitHeader:
        """Write the pending constraints, the witness (when proving) and the header."""
        config = [KeyValue('name', text=cfg.statement_name if name is None else name)]
        config += configuration or []
        header = self.chunker.finish(self.witness(), self.codec.encode(self.params.field_maximum), config)
        my_logging.info(f'Finished statement "{config[0].text}": {self.cs.num_constraints} constraints, '
                        f'free variable id {header.free_variable_id}')
        return header
