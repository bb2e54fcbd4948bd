"""
Conversion of single constraint rows between wire form (ids and coefficient bytes) and host form (handles and integers).
"""
from typing import List, Optional

from zkif.field.codec import FieldCodec
from zkif.messages.types import BilinearConstraint, Term
from zkif.r1cs.constraint_system import LinearCombination, Constraint
from zkif.r1cs.registry import VariableRegistry


def _codec(registry: VariableRegistry, codec: Optional[FieldCodec]) -> FieldCodec:
    return FieldCodec(registry.cs.params) if codec is None else codec


def terms_to_lc(terms: List[Term], registry: VariableRegistry, codec: Optional[FieldCodec] = None) -> LinearCombination:
    codec = _codec(registry, codec)
    lc = LinearCombination.zero()
    for term in terms:
        lc.add_term(registry.resolve(term.variable_id), codec.decode(term.value))
    return lc


def lc_to_terms(lc: LinearCombination, registry: VariableRegistry, codec: Optional[FieldCodec] = None) -> List[Term]:
    codec = _codec(registry, codec)
    return [Term(registry.reverse(var), codec.encode(coeff % codec.modulus)) for var, coeff in lc]


def to_host(constraint: BilinearConstraint, registry: VariableRegistry, annotation: str = '',
            codec: Optional[FieldCodec] = None) -> Constraint:
    """
    Translate a wire constraint into host form without adding it to the host system.

    :raise UnknownVariable: if any term references an id which is not registered
    :raise EncodingError: if a coefficient is not a valid field element
    """
    codec = _codec(registry, codec)
    a, b, c = (terms_to_lc(lc, registry, codec) for lc in constraint.linear_combinations)
    return Constraint(annotation, a, b, c)


def enforce(constraint: BilinearConstraint, registry: VariableRegistry, annotation: str = '',
            codec: Optional[FieldCodec] = None):
    """Translate a wire constraint and assert it in the host system of registry."""
    host = to_host(constraint, registry, annotation, codec)
    registry.cs.enforce(host.annotation, host.a, host.b, host.c)


def to_wire(constraint: Constraint, registry: VariableRegistry, codec: Optional[FieldCodec] = None) -> BilinearConstraint:
    """
    Translate a host constraint to wire form, keeping the term order of the host.

    Coefficients are always written with the full canonical width.

    :raise UnknownVariable: if a handle has no id
    """
    codec = _codec(registry, codec)
    return BilinearConstraint(lc_to_terms(constraint.a, registry, codec),
                              lc_to_terms(constraint.b, registry, codec),
                              lc_to_terms(constraint.c, registry, codec))
