"""
The main zkif package: an adapter between interchange statements for zero-knowledge circuits and an in-memory
rank-1 constraint system, including calls to external gadgets.

==========
Submodules
==========
* :py:mod:`.__main__`: Zkif command line interface
* :py:mod:`.config`: Global zkif configuration (both user-configuration as well as zkif-internal configuration)

===========
Subpackages
===========
* :py:mod:`.consumer`: Synthesis and validation of received statements
* :py:mod:`.errors`: Defines exceptions which may be raised by public zkif interfaces
* :py:mod:`.field`: Prime fields and the field element codec
* :py:mod:`.gadget`: Calls to external gadgets
* :py:mod:`.messages`: Interchange messages, their wire encoding, reader and builder
* :py:mod:`.my_logging`: Logging facilities
* :py:mod:`.producer`: Statement production from a host circuit
* :py:mod:`.r1cs`: Host constraint system, variable registry and constraint translation
* :py:mod:`.utils`: Internal helper functionality
"""
