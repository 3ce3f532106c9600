"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from radiko_cli.program.search import MAX_ROW_LIMIT, MIN_ROW_LIMIT

DEFAULT_OUTPUT_TEMPLATE = "{station_id}/{date}_{start}_{title}.{ext}"
TEMPLATE_PLACEHOLDERS = ("station_id", "date", "start", "end", "title", "ext")


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Premium (area-free) member login; leave empty to use the free service
    mail: str = ""
    password: str = Field(default="", repr=False)

    # Recording
    ffmpeg_dir: str = ""
    output_dir: str = "."
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    extension: str = "m4a"
    embed_cover: bool = True
    verify_output: bool = True

    # Network / auth
    reauthentication_interval: float = 3600.0
    http_timeout: float = 30.0

    # Search
    row_limit: int = 12
    all_regions: bool = False

    # Internal fields not loaded from INI file
    config_path: Optional[str] = Field(default=None, repr=False)

    @field_validator("output_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        """Validates the output path template."""
        if not v:
            raise ValueError("Output template cannot be empty.")
        if ".." in v or v.startswith(("/", "\\")):
            raise ValueError(
                "Output template cannot contain relative '..' or absolute paths."
            )
        if "{start}" not in v and "{title}" not in v:
            raise ValueError("Output template must contain at least {start} or {title}.")
        return v

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.lstrip(".").lower()
        if not v.isalnum():
            raise ValueError(f"Invalid file extension: {v!r}")
        return v

    @field_validator("http_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeout must be positive.")
        return v

    @field_validator("row_limit")
    @classmethod
    def validate_row_limit(cls, v: int) -> int:
        if v < MIN_ROW_LIMIT or v > MAX_ROW_LIMIT:
            raise ValueError(
                f"Row limit must be between {MIN_ROW_LIMIT} and {MAX_ROW_LIMIT}."
            )
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "AppConfig":
        """Mail and password must be configured together."""
        if bool(self.mail) != bool(self.password):
            raise ValueError("Both 'mail' and 'password' are required for login.")
        return self

    @property
    def has_credentials(self) -> bool:
        return bool(self.mail and self.password)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
