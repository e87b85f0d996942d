class StoreError(Exception):
    """
    Raised when the persistence layer fails for a reason other than a business rule.
    Callers only ever see a generic failure; details go to the operator log.
    """
    pass
