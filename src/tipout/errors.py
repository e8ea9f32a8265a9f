from __future__ import annotations


class TipoutError(Exception):
    """Base class for tipout computation failures."""


class TipoutInputError(TipoutError, ValueError):
    """Raised when shift or role configuration records are malformed."""


class MissingRoleError(TipoutInputError, KeyError):
    def __init__(self, role_id: str, shift_id: str | None = None):
        self.role_id = role_id
        self.shift_id = shift_id
        if shift_id:
            message = f"Shift {shift_id} references role {role_id} which has no configuration history"
        else:
            message = f"Role {role_id} not present in the supplied configuration map"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]
