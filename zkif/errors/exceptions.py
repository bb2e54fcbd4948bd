"""
This module contains the definitions of all exceptions which may be publicly raised by zkif
"""
from typing import Optional, Sequence


class ZkifError(Exception):
    """
    Error while building or consuming a statement
    """
    pass


class EncodingError(ZkifError):
    """
    Field element bytes are oversized or non-canonical, or a wire message is malformed
    """
    pass


class UnknownVariable(ZkifError):
    """
    A constraint or lookup references a variable which was never registered
    """

    def __init__(self, msg: str, variable_id: Optional[int] = None):
        super().__init__(msg)
        self.variable_id = variable_id


class IdMismatch(ZkifError):
    """
    A gadget echoed different input ids than the ones it was called with
    """

    def __init__(self, msg: str, expected: Sequence[int] = (), actual: Sequence[int] = ()):
        super().__init__(msg)
        self.expected = list(expected)
        self.actual = list(actual)


class SynthesisError(ZkifError):
    """
    Error while synthesizing constraints into the host constraint system
    """
    pass


class Unsatisfiable(SynthesisError):
    """
    The circuit cannot be satisfied
    """
    pass


class GadgetFailure(Unsatisfiable):
    """
    An external gadget signaled failure
    """
    pass


class IncompleteWitness(SynthesisError):
    """
    A value is required (proving mode) but was not supplied
    """

    def __init__(self, msg: str, variable_id: Optional[int] = None):
        super().__init__(msg)
        self.variable_id = variable_id


class UnsatisfiedConstraint(ZkifError):
    """
    The witness does not satisfy a constraint of the statement
    """

    def __init__(self, msg: str, annotation: Optional[str] = None):
        super().__init__(msg)
        self.annotation = annotation
