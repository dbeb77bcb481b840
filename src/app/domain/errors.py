from __future__ import annotations


class WorkbenchError(Exception):
    pass


class InvalidWorkbenchDocError(WorkbenchError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid workbench document: {'; '.join(errors)}")
        self.errors = errors


class UnknownStackError(WorkbenchError):
    def __init__(self, key: str):
        super().__init__(f"Unknown stack: {key}")
        self.key = key
