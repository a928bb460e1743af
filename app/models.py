"""Models for data returned by upstream APIs."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GitHubRepository(BaseModel):
    """A repository as listed by the GitHub REST API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    language: Optional[str] = None
    stars: int = Field(default=0, alias="stargazers_count")

    def describe(self) -> str:
        return f"{self.name} ({self.language}, ★{self.stars})"
