"""Exception hierarchy for statusboard."""


class StatusBoardError(Exception):
    pass


class CollectionError(StatusBoardError):
    """The OS metrics interface is unavailable. Fatal for the render."""


class FetchFailure(StatusBoardError):
    """The background image could not be fetched or decoded."""


class FontLoadFailure(StatusBoardError):
    """A font asset could not be loaded."""


class EncodingError(StatusBoardError):
    """The pixel buffer could not be serialized. Fatal for the render."""
