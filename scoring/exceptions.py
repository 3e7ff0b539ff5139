"""Errors raised by the scoring engine and its callers."""


class ScoringError(ValueError):
    pass


class InvalidPlayerError(ScoringError):
    pass


class InvalidPointError(ScoringError):
    pass


class InvalidConfigError(ScoringError):
    pass


class MatchNotStartedError(RuntimeError):
    pass
