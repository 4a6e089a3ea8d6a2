from dataclasses import dataclass


@dataclass
class AssignRoleResult:
    success: bool
    message: str
    redirect_url: str | None = None
    error: str | None = None
    retryable: bool = False
