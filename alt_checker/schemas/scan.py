from pydantic import BaseModel, ConfigDict, Field


class ScanRequest(BaseModel):
    """A single-page alt-text scan."""

    url: str | None = Field(
        default=None,
        description="Page to analyse; https:// is assumed when no scheme is given",
        examples=["www.example.com/products"],
    )
    deep: bool = Field(
        default=False,
        description="Use the wide (300 word) proximity window for duplicate-text detection",
    )


class ImageEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    src: str = Field(description="Resolved absolute image URL", examples=["https://example.com/a.jpg"])
    alt: str = Field(description="Alt text as authored (trimmed)", examples=["Golden retriever puppy"])
    matching_snippet: str | None = Field(
        default=None,
        alias="matchingSnippet",
        description="Nearby text containing the alt text, match wrapped in [[ ]]",
    )
    advisories: list[str] | None = Field(
        default=None,
        description="Hints for manual review: too_short / too_long / keyword_list / random_token",
    )


class ScanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_images: int = Field(
        alias="totalImages", description="Images remaining after placeholder filtering", examples=[25],
    )
    error_groups: dict[str, list[ImageEntry]] = Field(
        alias="errorGroups",
        description="Missing Alt Text / File Name / Matching Nearby Content / Manual Check",
    )
    engine: str = Field(description="html or js-dom", examples=["html"])
    blocked: bool | None = Field(
        default=None, description="Set when anti-automation defenses limited the analysis",
    )
    fallback: bool | None = Field(
        default=None, description="Set when the rendered pass failed and static results are shown",
    )
    note: str | None = Field(default=None, description="Advisory note for blocked/fallback results")


class ScanErrorResponse(BaseModel):
    error: str = Field(description="invalid_url / typo / blocked / internal", examples=["typo"])
