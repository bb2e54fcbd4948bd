"""
This module defines pinned versions, both of the zkif package itself and of the wire format it reads and writes
"""
import os

from semantic_version import NpmSpec, Version


class Versions:
    WIRE_FORMAT_VERSION = '1.0.0'
    WIRE_FORMAT_COMPATIBILITY = NpmSpec('^1.0.0')

    # Read zkif version from VERSION file
    with open(os.path.join(os.path.realpath(os.path.dirname(__file__)), 'VERSION')) as f:
        ZKIF_VERSION = f.read().strip()

    @staticmethod
    def is_compatible_wire_version(version: str) -> bool:
        """Return true if messages written with wire format 'version' can be read by this zkif version."""
        version = version[1:] if version.startswith('v') else version
        try:
            v = Version(version)
        except ValueError:
            return False
        return Versions.WIRE_FORMAT_COMPATIBILITY.match(v)
