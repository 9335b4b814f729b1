"""Pydantic models for DAVID client configuration."""

from pydantic import BaseModel, Field, field_validator

# GO levels below 3 are too generic to be useful for BP; two pathway databases
DEFAULT_ANNOTATION_CATEGORIES = [
    "GOTERM_BP_2",
    "GOTERM_BP_3",
    "GOTERM_BP_4",
    "GOTERM_BP_5",
    "GOTERM_CC_3",
    "GOTERM_CC_4",
    "GOTERM_CC_5",
    "GOTERM_MF_3",
    "GOTERM_MF_4",
    "GOTERM_MF_5",
    "KEGG_PATHWAY",
    "BIOCARTA",
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Safari/605.1.15"
)


class ServiceConfig(BaseModel):
    """Location of the DAVID service and how gene ids are interpreted."""

    base_url: str = Field(
        default="https://davidbioinformatics.nih.gov",
        description="DAVID service root (api.jsp and UserDownload/ live under it)",
    )
    id_type: str = Field(
        default="OFFICIAL_GENE_SYMBOL",
        description="DAVID identifier type for submitted gene ids",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended with a single '/'."""
        return v.rstrip("/")


class APIConfig(BaseModel):
    """Configuration for the HTTP transport."""

    timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Request timeout in seconds",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with every request",
    )
    download_retries: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts for the report download (1 = no retry)",
    )


class DavidConfig(BaseModel):
    """Main client configuration."""

    service: ServiceConfig = Field(
        default_factory=ServiceConfig,
        description="DAVID service location",
    )
    api: APIConfig = Field(
        default_factory=APIConfig,
        description="HTTP transport configuration",
    )
    species: str = Field(
        default="9606:Homo sapiens",
        min_length=1,
        description="Species filter, matched as a substring against report rows",
    )
    annotation_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ANNOTATION_CATEGORIES),
        min_length=1,
        description="DAVID annotation category codes requested by default",
    )
