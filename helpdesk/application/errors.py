"""Failures raised by the ticket processing pipeline and its collaborators."""


class PipelineError(Exception):
    """Base class for failures the processing pipeline knows how to report."""


class CollaboratorError(PipelineError):
    """The LLM collaborator raised or did not answer in time."""


class TransportError(PipelineError):
    """The event subscriber can no longer receive events."""


class SubscriberGoneError(TransportError):
    """The client closed the stream connection."""
