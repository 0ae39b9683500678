# src/extractor/model.py
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SectionValue(BaseModel):
    """Fields shared by every section payload."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: Optional[str] = None
    is_h3: bool = Field(default=False, alias="isH3")


class ProseValue(SectionValue):
    content: str = ""


class SpecificationRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bcd_specification_url: str = Field(alias="bcdSpecificationURL")


class SpecificationsValue(SectionValue):
    # Rows are looked up at render time, never embedded here.
    query: str
    specifications: List[SpecificationRef] = Field(default_factory=list)


class BCDValue(SectionValue):
    # Rows are looked up at render time.
    query: str


class ProseSection(BaseModel):
    type: Literal["prose"] = "prose"
    value: ProseValue


class SpecificationsSection(BaseModel):
    type: Literal["specifications"] = "specifications"
    value: SpecificationsValue


class BCDSection(BaseModel):
    type: Literal["browser_compatibility"] = "browser_compatibility"
    value: BCDValue


Section = Annotated[
    Union[ProseSection, SpecificationsSection, BCDSection],
    Field(discriminator="type"),
]
