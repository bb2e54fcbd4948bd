"""
This package contains the producer side: writing statements for circuits built in the host system.

==========
Submodules
==========
* :py:mod:`.chunker`: Size-bounded batching of outgoing constraints.
* :py:mod:`.exporter`: Host circuit builder which writes a statement.
"""
