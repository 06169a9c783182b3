from typing import Any

from pydantic import BaseModel


class Validator(BaseModel):
    address: str
    pub_key: dict[str, Any] | None = None
    voting_power: int = 0
    proposer_priority: int = 0


class ValidatorPage(BaseModel):
    block_height: int
    validators: list[Validator] = []
    count: int = 0
    total: int = 0
