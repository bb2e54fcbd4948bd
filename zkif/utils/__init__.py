"""
This package contains helper functionality.

==========
Submodules
==========
* :py:mod:`.helpers`: Miscellaneous operations (file reading and writing)
* :py:mod:`.progress_printer`: Context managers for colored terminal output
* :py:mod:`.run_command`: Wrapper for executing arbitrary commands with captured output
* :py:mod:`.timer`: Context manager for measuring and logging elapsed (wall clock) time
"""
