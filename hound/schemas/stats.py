from typing import List

from pydantic import BaseModel, ConfigDict


class StatItem(BaseModel):
    """One owned item (repository, project, issue) of a provider."""

    name: str
    description: str = ""

    model_config = ConfigDict(frozen=True)


class Stat(BaseModel):
    """Items collected for one provider."""

    name: str
    items: List[StatItem] = []
