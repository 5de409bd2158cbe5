"""Selection state behind the Streamlit result views.

Lookups are tagged with a token; a response only lands if its token is still
the current one, so a slow lookup for an old selection never overwrites a newer one.
"""
from dataclasses import dataclass, field
from itertools import count
from typing import List, Optional

from api_config import MAX_IMAGE_BYTES
from models import AnalysisResult, AnalysisType, CompoundRecord, Molecule, Reaction

ANALYSIS_LABELS = {
    AnalysisType.AI: "AI Analysis",
    AnalysisType.AI_FALLBACK: "AI Fallback",
    AnalysisType.FALLBACK_NO_API: "Demo Mode",
}

ANALYSIS_HINTS = {
    AnalysisType.FALLBACK_NO_API: "Demo Mode: add OPENAI_API_KEY to .env for AI-powered analysis",
    AnalysisType.BASIC: "Tip: the analysis service was unreachable, showing a basic offline analysis",
}


def analysis_label(analysis_type: AnalysisType) -> str:
    return ANALYSIS_LABELS.get(AnalysisType(analysis_type), "Basic Analysis")


def analysis_hint(analysis_type: AnalysisType) -> Optional[str]:
    return ANALYSIS_HINTS.get(AnalysisType(analysis_type))


def upload_error(size: int) -> Optional[str]:
    if size > MAX_IMAGE_BYTES:
        return "Please choose an image smaller than 10MB"
    return None


def molecule_label(molecule: Molecule) -> str:
    return f"{molecule.name} · Drawable" if molecule.drawable else molecule.name


def image_filename(molecule: Molecule) -> str:
    # "/" is not allowed in download file names.
    return f"{molecule.name.replace('/', '-')}.png"


_tokens = count(1)


@dataclass
class MoleculeViewerState:
    molecules: List[Molecule] = field(default_factory=list)
    selected_index: Optional[int] = None
    query: Optional[str] = None
    token: int = 0
    loading: bool = False
    record: Optional[CompoundRecord] = None
    error: Optional[str] = None

    @property
    def selected(self) -> Optional[Molecule]:
        if self.selected_index is None:
            return None
        return self.molecules[self.selected_index]

    def load(self, result: AnalysisResult) -> Optional[int]:
        self.molecules = list(result.molecules)
        if not self.molecules:
            self.selected_index = None
            self.query = None
            self._clear()
            return None
        return self.select(0)

    def select(self, index: int) -> int:
        """Makes molecule ``index`` active and returns the token for its lookup."""
        if not 0 <= index < len(self.molecules):
            raise IndexError(f"No molecule at index {index}")
        self.selected_index = index
        return self._begin(self.molecules[index].name)

    def search(self, name: str) -> int:
        """Free-text lookup; the molecule selection stays as it is."""
        return self._begin(name.strip())

    def apply_lookup(self, token: int, record: Optional[CompoundRecord] = None,
                     error: Optional[str] = None) -> bool:
        if token != self.token:
            return False
        self.loading = False
        self.record = record
        self.error = error
        return True

    def _begin(self, query: str) -> int:
        self.query = query
        self.token = next(_tokens)
        self.loading = True
        self.record = None
        self.error = None
        return self.token

    def _clear(self):
        self.token = next(_tokens)
        self.loading = False
        self.record = None
        self.error = None


@dataclass
class ReactionViewerState:
    reactions: List[Reaction] = field(default_factory=list)
    selected_index: Optional[int] = None
    current_step: int = 0

    @property
    def selected(self) -> Optional[Reaction]:
        if self.selected_index is None:
            return None
        return self.reactions[self.selected_index]

    @property
    def last_step(self) -> int:
        reaction = self.selected
        if reaction is None or not reaction.steps:
            return 0
        return len(reaction.steps) - 1

    @property
    def current_step_text(self) -> Optional[str]:
        reaction = self.selected
        if reaction is None or not reaction.steps:
            return None
        return reaction.steps[self.current_step]

    def load(self, result: AnalysisResult):
        self.reactions = list(result.reactions)
        self.selected_index = 0 if self.reactions else None
        self.current_step = 0

    def select(self, index: int):
        if not 0 <= index < len(self.reactions):
            raise IndexError(f"No reaction at index {index}")
        self.selected_index = index
        self.current_step = 0

    def advance(self) -> int:
        self.current_step = min(self.current_step + 1, self.last_step)
        return self.current_step

    def retreat(self) -> int:
        self.current_step = max(self.current_step - 1, 0)
        return self.current_step

    def jump(self, index: int) -> int:
        self.current_step = max(0, min(index, self.last_step))
        return self.current_step

    def reset(self) -> int:
        self.current_step = 0
        return self.current_step
