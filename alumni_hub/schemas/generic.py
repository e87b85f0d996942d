from pydantic import BaseModel

class ActionResult(BaseModel):
    message: str

class CountResult(BaseModel):
    count: int
