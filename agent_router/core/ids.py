"""Identifier generation for executions, correlations and invocations."""

import uuid


class IdGenerator:
    """
    Produces prefixed unique identifiers.

    The router only relies on the ids being strings; format and uniqueness
    are this class's concern. Inject a different generator to control them.
    """

    def execution_id(self) -> str:
        return f"exec_{uuid.uuid4().hex[:16]}"

    def correlation_id(self) -> str:
        return f"corr_{uuid.uuid4().hex[:16]}"

    def invocation_id(self) -> str:
        return f"inv_{uuid.uuid4().hex[:16]}"
