"""Error kinds raised by the notification hint store."""


class HintStoreError(Exception):
    """Base store error."""
    pass


class NotFoundError(HintStoreError):
    """No row matches the requested key."""
    def __init__(self, resource: str, identifier: str = ''):
        self.resource = resource
        self.identifier = identifier
        if identifier:
            super().__init__(f"{resource} with id {identifier} not found")
        else:
            super().__init__(f"{resource} not found")


class ValidationError(HintStoreError, ValueError):
    """Candidate hint failed required-field checks."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ClaimLostError(HintStoreError):
    """Another caller deleted the selected hint first; poll again."""
    def __init__(self, block_id: str, workspace_id: str):
        self.block_id = block_id
        self.workspace_id = workspace_id
        super().__init__(
            f"notification hint {block_id} in workspace {workspace_id} was claimed by another caller"
        )


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, NotFoundError)
