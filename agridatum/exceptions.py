#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# Exceptions
#

class HarvestValidationError(ValueError):
    # form input rejected before any network traffic
    pass

class BackendError(RuntimeError):
    def __init__(self, msg, code=None, raw_msg=None):
        self.code = code
        self.raw_msg = raw_msg if raw_msg is not None else msg
        super().__init__(msg)

class BackendUnreachable(BackendError):
    # no HTTP response at all: DNS, refused connection, reset
    pass

class ContractError(BackendError):
    # backend answered 2xx but left out something we require
    pass

# EOF
