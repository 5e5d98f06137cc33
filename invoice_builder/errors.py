"""Exceptions raised by the invoice builder."""


class InvoiceBuilderError(Exception):
    """Base class for invoice builder errors."""


class InvoiceGenerationError(InvoiceBuilderError):
    """The invoice cannot be exported; the message is shown to the user as is."""


class FormValidationError(InvoiceGenerationError):
    """The form has field errors; ``errors`` maps dotted field paths to messages."""

    def __init__(self, errors):
        self.errors = errors
        count = sum(len(v) for v in errors.values())
        super().__init__(f"Please fix {count} field error{'s' if count != 1 else ''} before generating the invoice")
