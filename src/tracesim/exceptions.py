"""Exception hierarchy for trace fetching and interpretation."""


class TracesimError(Exception):
    """Base class for all tracesim errors."""


class ExternalServiceError(TracesimError):
    """RPC node returned an error or an unusable response. Retriable."""


class TraceUnavailableError(TracesimError):
    """No usable trace could be obtained (missing result or reverted top-level call)."""


class AbiDecodeError(TracesimError):
    """Call-data did not decode against the expected function signature."""

    def __init__(self, signature: str, data: str, reason: str = "") -> None:
        self.signature = signature
        self.data = data
        msg = f"Cannot decode {signature} from {data[:74]}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class HandlerError(TracesimError):
    """A single handler invocation failed on one call node."""

    def __init__(self, handler_name: str, trace_to: str, selector: str | None) -> None:
        self.handler_name = handler_name
        self.trace_to = trace_to
        self.selector = selector
        super().__init__(f"Handler {handler_name} failed on call to {trace_to} (selector={selector})")


class TraceInterpretationError(TracesimError):
    """One or more handlers failed during an interpretation run.

    Raised after the whole tree has been walked so every failure is reported.
    """

    def __init__(self, failures: list[HandlerError]) -> None:
        self.failures = failures
        super().__init__(f"{len(failures)} handler(s) failed: " + "; ".join(str(f) for f in failures))
