"""
In-memory rank-1 constraint system, the host side of the adapter.

Variables live in two append-only arenas (public inputs and auxiliary variables) and are referred to by
:py:class:`Variable` handles, which are just (kind, index) pairs. Input 0 is the constant one.
"""
from enum import Enum
from typing import List, Optional, Tuple, Iterator, Union

from zkif.errors.exceptions import IncompleteWitness
from zkif.field.params import FieldParams


class VariableKind(Enum):
    INPUT = 'input'
    AUX = 'aux'


class Variable:
    __slots__ = ('kind', 'index')

    def __init__(self, kind: VariableKind, index: int):
        self.kind = kind
        self.index = index

    def __eq__(self, other):
        return isinstance(other, Variable) and self.kind == other.kind and self.index == other.index

    def __hash__(self):
        return hash((self.kind, self.index))

    def __repr__(self):
        return f'{self.kind.value}_{self.index}'


class LinearCombination:
    """Ordered list of (variable, coefficient) terms. Terms are never merged or re-sorted."""

    def __init__(self, terms: Optional[List[Tuple[Variable, int]]] = None):
        self.terms = [] if terms is None else list(terms)

    @staticmethod
    def zero() -> 'LinearCombination':
        return LinearCombination()

    def add_term(self, var: Variable, coeff: int = 1) -> 'LinearCombination':
        self.terms.append((var, coeff))
        return self

    def __add__(self, other: Union['LinearCombination', Tuple[int, Variable]]) -> 'LinearCombination':
        if isinstance(other, LinearCombination):
            return LinearCombination(self.terms + other.terms)
        coeff, var = other
        return LinearCombination(self.terms + [(var, coeff)])

    def __iter__(self) -> Iterator[Tuple[Variable, int]]:
        return iter(self.terms)

    def __len__(self):
        return len(self.terms)

    def __eq__(self, other):
        return isinstance(other, LinearCombination) and self.terms == other.terms

    def __repr__(self):
        return ' + '.join(f'{coeff}*{var}' for var, coeff in self.terms) or '0'


class Constraint:
    def __init__(self, annotation: str, a: LinearCombination, b: LinearCombination, c: LinearCombination):
        self.annotation = annotation
        self.a = a
        self.b = b
        self.c = c

    def __repr__(self):
        return f'{self.annotation}: ({self.a}) * ({self.b}) = ({self.c})'


class Checkpoint:
    def __init__(self, num_inputs: int, num_aux: int, num_constraints: int):
        self.num_inputs = num_inputs
        self.num_aux = num_aux
        self.num_constraints = num_constraints


class ConstraintSystem:
    """
    Constraint system over the prime field described by params.

    Values are optional: a system built without values (setup) only has a shape, a system where every variable
    has a value (proving) can be checked with :py:meth:`which_is_unsatisfied`.
    """

    def __init__(self, params: FieldParams):
        self.params = params
        self.modulus = params.modulus
        self.inputs: List[Tuple[str, Optional[int]]] = [('ONE', 1)]
        self.aux: List[Tuple[str, Optional[int]]] = []
        self.constraints: List[Constraint] = []

    @staticmethod
    def one() -> Variable:
        return Variable(VariableKind.INPUT, 0)

    def _reduce(self, value: Optional[int]) -> Optional[int]:
        return None if value is None else value % self.modulus

    def alloc(self, annotation: str, value: Optional[int] = None) -> Variable:
        self.aux.append((annotation, self._reduce(value)))
        return Variable(VariableKind.AUX, len(self.aux) - 1)

    def alloc_input(self, annotation: str, value: Optional[int] = None) -> Variable:
        self.inputs.append((annotation, self._reduce(value)))
        return Variable(VariableKind.INPUT, len(self.inputs) - 1)

    def enforce(self, annotation: str, a: LinearCombination, b: LinearCombination, c: LinearCombination):
        self.constraints.append(Constraint(annotation, a, b, c))

    def _arena(self, var: Variable) -> List[Tuple[str, Optional[int]]]:
        return self.inputs if var.kind == VariableKind.INPUT else self.aux

    def contains(self, var: Variable) -> bool:
        return 0 <= var.index < len(self._arena(var))

    def get_value(self, var: Variable) -> Optional[int]:
        return self._arena(var)[var.index][1]

    def get_annotation(self, var: Variable) -> str:
        return self._arena(var)[var.index][0]

    @property
    def num_inputs(self) -> int:
        return len(self.inputs)

    @property
    def num_aux(self) -> int:
        return len(self.aux)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(self.num_inputs, self.num_aux, self.num_constraints)

    def rollback(self, cp: Checkpoint):
        """Drop every variable and constraint added after cp was taken."""
        del self.inputs[cp.num_inputs:]
        del self.aux[cp.num_aux:]
        del self.constraints[cp.num_constraints:]

    def eval_lc(self, lc: LinearCombination) -> int:
        acc = 0
        for var, coeff in lc:
            val = self.get_value(var)
            if val is None:
                raise IncompleteWitness(f'No value assigned to {var} ({self.get_annotation(var)})')
            acc = (acc + coeff * val) % self.modulus
        return acc

    def which_is_unsatisfied(self) -> Optional[str]:
        """
        Return the annotation of the first constraint which is violated by the current assignment.

        :raise IncompleteWitness: if a constraint references a variable without value
        :return: None if all constraints are satisfied
        """
        for c in self.constraints:
            if self.eval_lc(c.a) * self.eval_lc(c.b) % self.modulus != self.eval_lc(c.c):
                return c.annotation
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None

    def pretty_print(self) -> str:
        lines = [f'{len(self.inputs)} inputs, {len(self.aux)} auxiliary variables, {len(self.constraints)} constraints']
        for idx, (name, val) in enumerate(self.inputs):
            lines.append(f'  input_{idx} ({name}) = {val}')
        for idx, (name, val) in enumerate(self.aux):
            lines.append(f'  aux_{idx} ({name}) = {val}')
        for c in self.constraints:
            lines.append(f'  {c}')
        return '\n'.join(lines)
