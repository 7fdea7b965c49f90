class SigningError(RuntimeError):
    """The configured key pair could not sign a credential.

    This points at a deployment defect, never at a bad request, so the HTTP
    layer maps it to an opaque 500.
    """
