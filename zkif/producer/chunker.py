from typing import List, Optional

from zkif import my_logging
from zkif.config import cfg
from zkif.messages.builder import StatementBuilder
from zkif.messages.types import BilinearConstraint, ConstraintsMessage, WitnessMessage, CircuitHeader, KeyValue, Variables


class ConstraintChunker:
    """
    Buffer outgoing constraints and write them as constraints messages of at most chunk_size constraints.

    Reading all written batches in order yields exactly the pushed sequence of constraints.
    """

    def __init__(self, builder: StatementBuilder, chunk_size: Optional[int] = None):
        if chunk_size is None:
            chunk_size = cfg.constraints_chunk_size
        if chunk_size <= 0:
            raise ValueError(f'Chunk size must be positive, got {chunk_size}')
        self.builder = builder
        self.chunk_size = chunk_size
        self.buffer: List[BilinearConstraint] = []
        self.flushed_batches = 0
        self.flushed_constraints = 0

    def push(self, constraint: BilinearConstraint):
        self.buffer.append(constraint)
        if len(self.buffer) >= self.chunk_size:
            self.flush()

    def flush(self):
        if not self.buffer:
            return
        self.builder.push_constraints(ConstraintsMessage(self.buffer))
        self.flushed_batches += 1
        self.flushed_constraints += len(self.buffer)
        self.buffer = []

    def finish(self, witness: Optional[Variables] = None, field_maximum: Optional[bytes] = None,
               configuration: Optional[List[KeyValue]] = None) -> CircuitHeader:
        """
        Write the remaining constraints, the witness (if given) and finally the header.

        :return: the written header
        """
        self.flush()
        if witness is not None:
            self.builder.push_witness(WitnessMessage(witness))
        header = self.builder.finish_header(field_maximum, configuration)
        my_logging.data('constraints', self.flushed_constraints)
        my_logging.data('constraints_messages', self.flushed_batches)
        return header
