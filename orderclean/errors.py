
class CleaningError(Exception):
    pass


class IngestionError(CleaningError):
    pass


class OverrideError(CleaningError):
    pass
