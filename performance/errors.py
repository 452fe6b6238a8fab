"""Errors raised while turning a MIDI performance into vocabulary tokens."""


class UnsupportedFormatError(ValueError):
    """Sequential track layout, non-metrical timing, or an unusable tempo."""


class MissingTempoError(ValueError):
    """No tempo message found in the piece."""


class TokenOutOfRangeError(ValueError):
    """Token index outside the performance vocabulary."""

    def __init__(self, index: int):
        super().__init__(f"index {index} not supported")
        self.index = index
