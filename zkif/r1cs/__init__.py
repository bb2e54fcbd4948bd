"""
This package contains the host rank-1 constraint system and its link to wire variable ids.

==========
Submodules
==========
* :py:mod:`.constraint_system`: In-memory constraint system with optional values.
* :py:mod:`.registry`: Mapping between wire ids and host handles, owner of the id counter.
* :py:mod:`.translator`: Conversion of constraint rows between wire and host form.
"""
