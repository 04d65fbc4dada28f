from pydantic import BaseModel


class ApplicationOut(BaseModel):
    applied: int
