#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Build a human-readable role session name for the caller.

When a role is assumed, AWS records the role session name in CloudTrail, so it
is the one piece of information that ties activity in an account back to the
person that ran aws-runas. `SessionIdentifier` builds a name from the caller's
identity:

    aws-runas-session_123456789012_Alice_1499716571

If the caller is already using an assumed role, the access key ID is used
instead of the account and user name:

    aws-runas-session_AKIAI44QH8DHBEXAMPLE_1499716571

AWS limits role session names to 64 characters. Rather than fail, the name
falls back to `aws-runas-session_1499716571` if the full form would be too long
or if the caller's identity cannot be determined.
"""

import logging
import re
import time

from awsrunas.cache import LazyValue
from awsrunas.session import IdentityLookupError

LOG = logging.getLogger(__name__)

SESSION_PREFIX = "aws-runas-session"
MAX_SESSION_NAME_LENGTH = 64

_ASSUMED_ROLE = re.compile(r":assumed-role/")


def user_or_access_key_id(identity):
    """Returns a short label for the `CallerIdentity` `identity`.

    If the identity is an assumed role, the label is the access key ID portion
    of the user ID. Otherwise, it is the account ID and the last component of
    the ARN joined by an underscore.
    """
    if _ASSUMED_ROLE.search(identity.arn):
        return identity.user_id.split(":", 1)[0]
    return f"{identity.account}_{identity.arn.split('/')[-1]}"


class SessionIdentifier:
    """Computes the role session name once and remembers it.

    `lookup` is a function of zero arguments that returns a `CallerIdentity`,
    typically `IdentityService.get_caller_identity`. It is only called the
    first time `compute` is invoked.
    """

    def __init__(self, lookup):
        self._lookup = lookup
        self._name = LazyValue(self._build)

    def compute(self):
        """Returns the session name, which is at most 64 characters."""
        return self._name.value()

    def _build(self):
        now = int(time.time())
        fallback = f"{SESSION_PREFIX}_{now}"

        try:
            identity = self._lookup()
        except IdentityLookupError as e:
            LOG.info("using basic session name: %s", e)
            return fallback

        name = f"{SESSION_PREFIX}_{user_or_access_key_id(identity)}_{now}"
        if len(name) > MAX_SESSION_NAME_LENGTH:
            LOG.info("using basic session name: %s is too long", name)
            return fallback
        return name
