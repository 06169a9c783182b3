from typing import Any, Union

from pydantic import BaseModel, ConfigDict


class Fee(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: list[dict[str, Any]] = []
    gas_limit: int = 0
    payer: str = ""
    granter: str = ""


class AuthInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    signer_infos: list[dict[str, Any]] = []
    fee: Fee = Fee()


class TxBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    messages: list[dict[str, Any]] = []
    memo: str = ""
    timeout_height: int = 0


class Tx(BaseModel):
    model_config = ConfigDict(extra="allow")

    body: TxBody
    auth_info: AuthInfo = AuthInfo()
    signatures: list[str] = []


class EventAttribute(BaseModel):
    key: str
    value: str
    index: bool = False


class Event(BaseModel):
    type: str
    attributes: list[EventAttribute] = []


class TxResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    height: int
    txhash: str
    code: int = 0
    raw_log: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    tx: dict[str, Any] | None = None
    timestamp: str = ""
    events: list[Event] = []


class Transaction(BaseModel):
    tx: Tx
    tx_response: TxResponse


class FailedTransaction(BaseModel):
    position: int
    hash: str
    error: str


class BlockTransactions(BaseModel):
    height: int
    transactions: list[Union[Transaction, FailedTransaction]] = []

    @property
    def failed(self) -> list[FailedTransaction]:
        return [t for t in self.transactions if isinstance(t, FailedTransaction)]
