"""
Protocol instantiators.

Each `<Name>Protocol.new(ldt_parameters, parameters)` derives a full
configuration and the matching transcript.
"""

from .base import IOPInstance
from .fri import FriParameters, FriProtocol
from .stir import StirParameters, StirProtocol
from .whir import WhirParameters, WhirProtocol
from .basefold import BasefoldParameters, BasefoldProtocol

__all__ = [
    'IOPInstance',
    'FriParameters',
    'FriProtocol',
    'StirParameters',
    'StirProtocol',
    'WhirParameters',
    'WhirProtocol',
    'BasefoldParameters',
    'BasefoldProtocol',
]
