import os
from abc import ABCMeta, abstractmethod
from typing import List, Optional

from zkif import my_logging
from zkif.config import cfg
from zkif.errors.exceptions import ZkifError
from zkif.messages.serialization import serialize
from zkif.messages.types import CircuitHeader, ConstraintsMessage, WitnessMessage, Variables, KeyValue, Message
from zkif.r1cs.registry import VariableCounter
from zkif.utils.helpers import save_to_file


class Sink(metaclass=ABCMeta):
    """Single-writer, append-only destination of the messages of one statement."""

    @abstractmethod
    def push_header(self, header: CircuitHeader):
        pass

    @abstractmethod
    def push_constraints(self, msg: ConstraintsMessage):
        pass

    @abstractmethod
    def push_witness(self, msg: WitnessMessage):
        pass


class MemorySink(Sink):
    def __init__(self):
        self.messages: List[Message] = []

    def push_header(self, header: CircuitHeader):
        self.messages.append(header)

    def push_constraints(self, msg: ConstraintsMessage):
        self.messages.append(msg)

    def push_witness(self, msg: WitnessMessage):
        self.messages.append(msg)


class FileSink(Sink):
    """
    Write each message to its own file in the workspace directory.

    Constraints batches are numbered in the order in which they are pushed.
    """

    def __init__(self, workspace: str):
        os.makedirs(workspace, exist_ok=True)
        self.workspace = workspace
        self.constraints_files = 0

    def push_header(self, header: CircuitHeader):
        save_to_file(self.workspace, cfg.header_file_name, serialize(header) + b'\n')

    def push_constraints(self, msg: ConstraintsMessage):
        save_to_file(self.workspace, cfg.get_constraints_file_name(self.constraints_files), serialize(msg) + b'\n')
        self.constraints_files += 1

    def push_witness(self, msg: WitnessMessage):
        save_to_file(self.workspace, cfg.witness_file_name, serialize(msg) + b'\n')

    def written_files(self) -> List[str]:
        """Paths of all files of a finished statement, in reading order."""
        files = [cfg.get_constraints_file_name(i) for i in range(self.constraints_files)]
        files += [f for f in (cfg.witness_file_name, cfg.header_file_name) if os.path.exists(os.path.join(self.workspace, f))]
        return [os.path.join(self.workspace, f) for f in files]


class StatementBuilder:
    """
    Producer side of a statement: hands out variable ids and forwards messages to a sink.

    The header is only written by :py:meth:`finish_header`, which must be the last call.
    """

    def __init__(self, sink: Sink, counter: Optional[VariableCounter] = None):
        self.sink = sink
        self.counter = VariableCounter() if counter is None else counter
        self._instance_ids: List[int] = []
        self._instance_values: List[Optional[bytes]] = []
        self._finished = False

    def allocate_var(self) -> int:
        return self.counter.take()

    def allocate_instance_var(self, value: Optional[bytes]) -> int:
        var_id = self.counter.take()
        self._instance_ids.append(var_id)
        self._instance_values.append(value)
        return var_id

    def push_constraints(self, msg: ConstraintsMessage):
        self._check_not_finished()
        my_logging.debug(f'Writing constraints message with {len(msg)} constraints')
        self.sink.push_constraints(msg)

    def push_witness(self, msg: WitnessMessage):
        self._check_not_finished()
        my_logging.debug(f'Writing witness message with {len(msg.assigned_variables)} values')
        self.sink.push_witness(msg)

    @property
    def connections(self) -> Variables:
        if any(v is None for v in self._instance_values):
            values = None
        else:
            values = b''.join(self._instance_values)
        return Variables(list(self._instance_ids), values)

    def finish_header(self, field_maximum: Optional[bytes] = None, configuration: Optional[List[KeyValue]] = None) -> CircuitHeader:
        self._check_not_finished()
        header = CircuitHeader(self.counter.free_variable_id, self.connections, field_maximum, configuration)
        my_logging.debug(f'Writing header, free variable id {header.free_variable_id}')
        self.sink.push_header(header)
        self._finished = True
        return header

    def _check_not_finished(self):
        if self._finished:
            raise ZkifError('Statement header was already written')
