"""
This package contains the consumer side: rebuilding and checking host constraint systems from received statements.

==========
Submodules
==========
* :py:mod:`.circuit`: Synthesis of a statement into a host constraint system and witness validation.
"""
