"""Pydantic models shared by the API, the analyzer and the Streamlit UI."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisType(str, Enum):
    AI = "ai"
    AI_FALLBACK = "ai_fallback"
    FALLBACK_NO_API = "fallback_no_api"
    FALLBACK = "fallback"
    BASIC = "basic"


class Molecule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., examples=["Benzene"])
    smiles: str = Field(..., examples=["c1ccccc1"])
    description: str = ""
    drawable: bool = True


class Reaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., examples=["Esterification"])
    steps: List[str] = Field(default_factory=list)
    reactants: Optional[List[str]] = None
    products: Optional[List[str]] = None
    # Should hold SMILES only. Entries are never rewritten here.
    intermediates: Optional[List[str]] = None


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    molecules: List[Molecule]
    reactions: List[Reaction]
    question: str = ""
    analysis_type: AnalysisType = Field(AnalysisType.AI, alias="analysisType")
    analysis: Optional[str] = None


class CompoundRecord(BaseModel):
    cid: int
    formula: str = "N/A"
    weight: Optional[float] = None
    canonical_smiles: str = "N/A"
    iupac_name: str = "N/A"


class QuestionRequest(BaseModel):
    question: Optional[str] = Field(None, examples=["Draw the structure of benzene"])
