"""Data models for the watch log agent: show lookups, log entries, tool arguments."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TOOL_RESULT_TEMPLATE = "The show is {title} and it is available on {service}"


class ShowInfo(BaseModel):
    """Title and service for one show. Blank fields mean the lookup found nothing."""

    title: str = Field("", description="Show name as listed by the metadata service.")
    service: str = Field("", description="Network or streaming service.")

    @property
    def found(self) -> bool:
        return bool(self.title or self.service)

    def to_tool_content(self) -> str:
        """Sentence handed back to the model as the get_show_info result."""
        return TOOL_RESULT_TEMPLATE.format(title=self.title, service=self.service)


class ViewLogEntry(BaseModel):
    """One viewing session as emitted by the model. Strict: numbers must be JSON numbers."""

    model_config = ConfigDict(strict=True)

    days_offset: int = Field(..., description="Days relative to today (negative = in the past).")
    service: str = Field(..., description="Service the show was watched on.")
    title: str = Field(..., description="Show title.")
    watch_time: int = Field(..., description="Minutes watched.")


class ShowInfoArgs(BaseModel):
    """Arguments of a get_show_info tool call."""

    query_string: str = Field(..., description="Search string for the content.")


class TvdbRecord(BaseModel):
    """Candidate record in a metadata search response."""

    country: str = ""
    name: str = ""
    network: str = ""

    @field_validator("country", "name", "network", mode="before")
    @classmethod
    def _null_as_blank(cls, v):
        return "" if v is None else v


class TvdbSearchResponse(BaseModel):
    """Body of GET {base}/search."""

    data: Optional[list[TvdbRecord]] = Field(default_factory=list)

    def first_usa_record(self) -> Optional[TvdbRecord]:
        for record in self.data or []:
            if record.country.lower() == "usa":
                return record
        return None
