from typing import Dict

from pydantic import BaseModel


class TransitionRequest(BaseModel):
    status: str


class DeleteResponse(BaseModel):
    table: str
    id: int
    deleted: Dict[str, int]
    detached: Dict[str, int]
