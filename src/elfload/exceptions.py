class ELFError(Exception):
    def __init__(self, message):
        super(ELFError, self).__init__(message)


class LoadError(ELFError):
    pass


class SectionLookupError(ELFError):
    pass


class NotELFError(LoadError, SectionLookupError):
    pass


class NoLoadableSegmentsError(LoadError):
    pass


class BoundsError(ELFError):
    """A range computed from file contents does not fit a buffer"""

    def __init__(self, message, offset, size, limit):
        super(BoundsError, self).__init__(message)
        self.offset = offset
        self.size = size
        self.limit = limit


class TruncatedFieldError(BoundsError):
    pass


class InputOverflowError(LoadError, BoundsError):
    pass


class OutputOverflowError(LoadError, BoundsError):
    pass


class MalformedStringTableError(SectionLookupError):
    pass


class MalformedSectionTableError(SectionLookupError):
    pass


class DecompressionError(ELFError):
    pass
