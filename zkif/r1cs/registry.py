from enum import Enum
from typing import Dict, List, Optional

from zkif.errors.exceptions import UnknownVariable
from zkif.r1cs.constraint_system import ConstraintSystem, Variable


class Role(Enum):
    PUBLIC = 'public'
    PRIVATE = 'private'


class VariableCounter:
    """Next free variable id of one statement. Only ever moves forward, except when a registry rolls back."""

    def __init__(self, free_variable_id: int = 1):
        if free_variable_id < 1:
            raise ValueError('Variable id 0 is reserved for the constant one')
        self.free_variable_id = free_variable_id

    def take(self) -> int:
        var_id = self.free_variable_id
        self.free_variable_id += 1
        return var_id

    def advance_past(self, var_id: int):
        self.free_variable_id = max(self.free_variable_id, var_id + 1)


class RegistryCheckpoint:
    def __init__(self, free_variable_id: int, journal_len: int):
        self.free_variable_id = free_variable_id
        self.journal_len = journal_len


class VariableRegistry:
    """
    Bidirectional mapping between wire variable ids and host variable handles of one statement.

    Id 0 is bound to the constant one of cs on construction and never allocated.
    Several ids may refer to the same handle (gadget connections), the reverse mapping then yields the first one.
    """

    def __init__(self, cs: ConstraintSystem, counter: Optional[VariableCounter] = None):
        self.cs = cs
        self.counter = VariableCounter() if counter is None else counter
        self._forward: Dict[int, Variable] = {}
        self._reverse: Dict[Variable, int] = {}
        self._journal: List[int] = []
        self.bind_constant()

    @property
    def free_variable_id(self) -> int:
        return self.counter.free_variable_id

    def bind_constant(self):
        one = self.cs.one()
        self._forward[0] = one
        self._reverse[one] = 0

    def _bind(self, var_id: int, handle: Variable):
        self._forward[var_id] = handle
        self._reverse.setdefault(handle, var_id)
        self._journal.append(var_id)

    def _alloc_handle(self, var_id: int, role: Role, value: Optional[int], annotation: Optional[str]) -> Variable:
        if annotation is None:
            annotation = f'{role.value}_{var_id}'
        if role == Role.PUBLIC:
            return self.cs.alloc_input(annotation, value)
        else:
            return self.cs.alloc(annotation, value)

    def allocate(self, role: Role, value: Optional[int] = None, annotation: Optional[str] = None) -> int:
        """
        Allocate a fresh host variable and assign it the next free id.

        :param role: public variables become inputs of the host system, private ones auxiliary variables
        :param value: optional value (required when proving)
        :return: the new variable id
        """
        var_id = self.counter.free_variable_id
        handle = self._alloc_handle(var_id, role, value, annotation)
        self.counter.take()
        self._bind(var_id, handle)
        return var_id

    def connect(self, handle: Variable) -> int:
        """Assign the next free id to an existing host variable."""
        if not self.cs.contains(handle):
            raise UnknownVariable(f'Handle {handle} does not belong to this constraint system')
        var_id = self.counter.take()
        self._bind(var_id, handle)
        return var_id

    def adopt(self, var_id: int, role: Role, value: Optional[int] = None, annotation: Optional[str] = None) -> Variable:
        """
        Allocate a fresh host variable for an id chosen by someone else (a statement or a gadget).

        :raise ValueError: if var_id is 0 or already bound
        :return: the new host handle
        """
        if var_id == 0 or var_id in self._forward:
            raise ValueError(f'Variable id {var_id} is already bound')
        handle = self._alloc_handle(var_id, role, value, annotation)
        self._bind(var_id, handle)
        self.counter.advance_past(var_id)
        return handle

    def resolve(self, var_id: int) -> Variable:
        try:
            return self._forward[var_id]
        except KeyError:
            raise UnknownVariable(f'Unknown variable id {var_id}', var_id) from None

    def reverse(self, handle: Variable) -> int:
        try:
            return self._reverse[handle]
        except KeyError:
            raise UnknownVariable(f'Variable {handle} has no id') from None

    def __contains__(self, var_id: int) -> bool:
        return var_id in self._forward

    def __len__(self):
        return len(self._forward)

    def checkpoint(self) -> RegistryCheckpoint:
        return RegistryCheckpoint(self.counter.free_variable_id, len(self._journal))

    def ids_since(self, cp: RegistryCheckpoint) -> List[int]:
        """Ids bound after cp was taken, in binding order."""
        return self._journal[cp.journal_len:]

    def rollback(self, cp: RegistryCheckpoint):
        """Forget every binding made after cp was taken and reset the counter."""
        while len(self._journal) > cp.journal_len:
            var_id = self._journal.pop()
            handle = self._forward.pop(var_id)
            if self._reverse.get(handle) == var_id:
                del self._reverse[handle]
        self.counter.free_variable_id = cp.free_variable_id
