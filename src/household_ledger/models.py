from typing import Any, Literal

from pydantic import BaseModel, field_validator

TransactionType = Literal["income", "expense"]

ANONYMOUS_USER = "anonymous"


def _coerce_id(value: Any) -> Any:
    # PostgREST returns bigint keys as numbers.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class TransactionCreate(BaseModel):
    description: str = ""
    amount: float
    category: str
    type: TransactionType
    date: str | None = None
    user_id: str | None = None


class Transaction(BaseModel):
    id: str = ""
    description: str = ""
    amount: float
    category: str
    type: TransactionType
    date: str
    user_id: str = ANONYMOUS_USER

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        return "" if value is None else _coerce_id(value)

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_income(self) -> bool:
        return self.type == "income"


class Category(BaseModel):
    key: str
    label: str


class UserProfile(BaseModel):
    user_id: str
    name: str
    display_name: str
    avatar: str
    initial: str
