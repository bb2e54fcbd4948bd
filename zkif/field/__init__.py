"""
This package contains the prime field definitions and the field element codec.

==========
Submodules
==========
* :py:mod:`.codec`: Conversion between wire field bytes (little-endian, variable length) and field integers.
* :py:mod:`.meta`: Moduli and element widths of the supported fields.
* :py:mod:`.params`: Accessor class for the field metadata.
"""
