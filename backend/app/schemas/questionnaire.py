"""Pydantic schemas for the question catalog."""

from typing import List, Optional

from pydantic import BaseModel, Field


class QuestionOptionResponse(BaseModel):
    id: int
    text: str
    score_value: Optional[int] = None

    model_config = {"from_attributes": True}


class SectionResponse(BaseModel):
    id: int
    title: str

    model_config = {"from_attributes": True}


class QuestionResponse(BaseModel):
    """Question with its options and section."""

    id: int
    text: str
    order_index: int
    section_id: Optional[int] = None
    section: Optional[SectionResponse] = None
    options: List[QuestionOptionResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


# Catalog import document (seed-catalog)
class CatalogOption(BaseModel):
    id: int = Field(gt=0)
    text: str = Field(min_length=1)
    score_value: Optional[int] = Field(default=None, ge=0, le=100)


class CatalogQuestion(BaseModel):
    id: int = Field(gt=0)
    text: str = Field(min_length=1)
    order_index: int = 0
    options: List[CatalogOption] = Field(default_factory=list)


class CatalogSection(BaseModel):
    id: int = Field(gt=0)
    title: str = Field(min_length=1)
    questions: List[CatalogQuestion] = Field(default_factory=list)


class CatalogTemplate(BaseModel):
    id: int = Field(gt=0)
    name: str
    version_number: int = Field(gt=0)
    is_active: bool = True


class CatalogDocument(BaseModel):
    """
    Questionnaire document accepted by ``QuestionnaireService.import_catalog``.

    Questions nested in a section belong to it; top level ``questions`` have
    no section.
    """

    template: Optional[CatalogTemplate] = None
    sections: List[CatalogSection] = Field(default_factory=list)
    questions: List[CatalogQuestion] = Field(default_factory=list)
