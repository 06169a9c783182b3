class NodeError(Exception):
    """Base class for every failure raised while talking to or reconstructing from the node."""


class NodeRpcError(NodeError):
    """The node RPC or REST endpoint failed or answered with an error."""


class FetchError(NodeError):
    """A chunk or page could not be fetched from the node.

    Carries enough context (chunk index or page number, height, last known
    total) to replay the failing request against the same node state.
    """

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        page: int | None = None,
        height: int | None = None,
        total: int | None = None,
    ):
        super().__init__(message)
        self.index = index
        self.page = page
        self.height = height
        self.total = total


class DecodeError(NodeError):
    """A chunk payload could not be decoded from its transport encoding."""

    def __init__(self, message: str, *, index: int | None = None):
        super().__init__(message)
        self.index = index


class ParseError(NodeError):
    """A presentation, disclosure or address is structurally invalid."""

    def __init__(self, reason: str, index: int | None = None):
        message = reason if index is None else f"{reason} (disclosure {index})"
        super().__init__(message)
        self.reason = reason
        self.index = index


class EncodeError(NodeError):
    """The disclosed claim set could not be serialized."""
