from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ComponentAction(str, Enum):
    UPDATE = "UPDATE"
    REPLACE = "REPLACE"

    @property
    def audit_tag(self) -> str:
        return f"{self.value}_ACTION"

    @property
    def success_message(self) -> str:
        if self is ComponentAction.UPDATE:
            return "Component updated successfully"
        return "Component replaced successfully"


class ComponentMutationData(BaseModel):
    component_id: str
    version: Optional[int] = None
    action: ComponentAction
    files_uploaded: int = 0


class ComponentDetailsResponse(BaseModel):
    success: bool = True
    message: str
    data: ComponentMutationData


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
