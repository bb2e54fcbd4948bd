"""
This package contains the interchange messages and the collaborators which read and write them.

==========
Submodules
==========
* :py:mod:`.builder`: Producer side: id allocation and message sinks.
* :py:mod:`.reader`: Consumer side: message collection with lazy constraint iteration.
* :py:mod:`.serialization`: JSON wire encoding.
* :py:mod:`.types`: Message classes.
"""
