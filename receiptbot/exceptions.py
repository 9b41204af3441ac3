"""Error taxonomy for the receipt pipeline."""


class ReceiptProcessingError(Exception):
    """Raised when high-level receipt workflows fail."""


class InsufficientInputError(ReceiptProcessingError):
    """Raised when OCR text is too short to be analysed.

    This is the only error the pipeline surfaces to its caller. It rejects the
    whole invocation; retrying without a new image will not help.
    """

    def __init__(self, text_length: int, minimum: int) -> None:
        self.text_length = text_length
        self.minimum = minimum
        super().__init__(
            f"OCR text is too short for analysis ({text_length} < {minimum} characters)"
        )


class ProviderError(ReceiptProcessingError):
    """Raised by an external OCR or analysis provider. Absorbed by the chains."""


class ProviderUnavailableError(ProviderError):
    """Raised when a provider is called without the credentials it needs."""


class ProviderResponseError(ProviderError):
    """Raised when a provider answers with something that cannot be used."""


class ConfigurationError(ReceiptProcessingError):
    """Raised when configuration loading encounters issues."""
