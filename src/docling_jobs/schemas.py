from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .jobs import ConversionRequest, JobRecord, PageRange


class SubmitJobRequest(BaseModel):
    source: str = Field(..., min_length=1, description="URL or path of the document to convert")
    page_range: Optional[tuple[int, int]] = Field(
        None, description="Inclusive [start, end] page bounds, 1-based"
    )

    @field_validator("source")
    @classmethod
    def _source_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("source must not be blank")
        return v

    @field_validator("page_range")
    @classmethod
    def _valid_bounds(cls, v: Optional[tuple[int, int]]) -> Optional[tuple[int, int]]:
        if v is not None:
            start, end = v
            if start < 1 or end < start:
                raise ValueError("page_range must satisfy 1 <= start <= end")
        return v

    def to_request(self) -> ConversionRequest:
        page_range = PageRange(*self.page_range) if self.page_range else None
        return ConversionRequest(source=self.source, page_range=page_range)


class SubmitJobResponse(BaseModel):
    id: str
    state: str
    links: dict[str, str]


class JobStatusResponse(BaseModel):
    id: str
    state: str
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: str
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @classmethod
    def from_record(cls, job: JobRecord) -> "JobStatusResponse":
        return cls(**job.to_dict())


class JobResultResponse(BaseModel):
    id: str
    result: str
