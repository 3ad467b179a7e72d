#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#

__version__ = '0.1.0'

__all__ = [ 'identity', 'signers', 'api', 'records', 'session', 'config',
            'net', 'exceptions', 'constants', 'utils' ]

# credentials -> farmer id
from agridatum.identity import derive, DerivedIdentity

# one farmer's login, submit pipeline and records
from agridatum.session import FarmerSession
