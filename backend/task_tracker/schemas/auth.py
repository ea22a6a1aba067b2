# task_tracker/schemas/auth.py
from pydantic import EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from task_tracker.core.password_policy import describe_violations, evaluate_password
from task_tracker.schemas.base import CamelModel
from task_tracker.schemas.user import UserOut


class RegisterIn(CamelModel):
    email: EmailStr
    password: str = Field(max_length=128)
    name: str = Field(min_length=2, max_length=100)

    @field_validator("password")
    @classmethod
    def password_meets_policy(cls, value: str) -> str:
        violations = evaluate_password(value)
        if violations:
            raise PydanticCustomError(
                "weak_password",
                "; ".join(describe_violations(violations)),
                {"violations": violations},
            )
        return value


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class LoginOut(CamelModel):
    access_token: str
    user: UserOut


class AccessTokenOut(CamelModel):
    access_token: str


class MessageOut(CamelModel):
    message: str
