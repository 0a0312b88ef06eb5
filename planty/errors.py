# planty/errors.py
# Exception types shared by the service and the client.


class PlantyError(Exception):
    """Base class for errors raised by planty."""


class InputError(PlantyError):
    """The request carried no usable image."""


class ExternalModelError(PlantyError):
    """The generative model could not be called or produced no text."""


class CaptureError(PlantyError):
    """The camera could not be opened (client side only)."""
