from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ExtractedRecords(BaseModel):
    """Fields pulled out of an uploaded medical document ("" when absent)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    medical_history: str = ""
    allergies: str = ""
    medications: str = ""
    dietary_history: str = ""
    social_background: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _flatten(cls, v):
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ", ".join(str(item) for item in v if item)
        return str(v)
