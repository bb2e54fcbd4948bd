"""
This package contains the gadget call protocol.

==========
Submodules
==========
* :py:mod:`.bridge`: Atomic merging of gadget responses into the host system.
* :py:mod:`.command`: Gadgets implemented by external executables.
* :py:mod:`.examples`: Example gadgets.
"""
