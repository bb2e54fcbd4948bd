"""
This package contains the exceptions which may be raised by public zkif interfaces.

==========
Submodules
==========
* :py:mod:`.exceptions`: Exception hierarchy rooted at :py:class:`.exceptions.ZkifError`.
"""
