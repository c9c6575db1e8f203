from pydantic import BaseModel, Field


class SuggestionRequest(BaseModel):
    category: str = Field(..., description="Feedback category, e.g. toneAndStyle")
    index: int = Field(..., ge=0, description="Position of the tip within its category")
