from typing import Any, Optional

from pydantic import BaseModel

from online_judge.data.schemas.enums import ResultCode


class ServiceResponse(BaseModel):
    """Uniform result of a service call: a status plus an optional payload.

    ``token`` and ``data`` are only populated when ``code`` is
    ``ResultCode.SUCCESS``.
    """

    code: ResultCode
    token: Optional[str] = None
    data: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.code == ResultCode.SUCCESS

    @classmethod
    def fail(cls, code: ResultCode) -> "ServiceResponse":
        return cls(code=code)

    @classmethod
    def success(cls, token: Optional[str] = None, data: Any = None) -> "ServiceResponse":
        return cls(code=ResultCode.SUCCESS, token=token, data=data)


class ApiResponse(BaseModel):
    code: int
    msg: str
    data: Optional[Any] = None
