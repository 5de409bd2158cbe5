import logging
from functools import lru_cache
from typing import Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from api_config import MAX_IMAGE_BYTES, configure_logging, load_settings
from chem_analyzer import ChemistryAnalyzer
from models import AnalysisResult, CompoundRecord, QuestionRequest
from tools.compound_lookup import CompoundLookupError, PubChemLookup
from tools.visualizer import ChemVisualizer, StructureRenderError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"
IMAGE_TOO_LARGE = "Image must be smaller than 10MB"

app = FastAPI(
    title="ChemSight API",
    description="Extracts molecules and reaction mechanisms from chemistry questions and images.",
    version="0.1.0",
)


# --- Dependencies ---
@lru_cache()
def get_analyzer() -> ChemistryAnalyzer:
    return ChemistryAnalyzer.from_settings(load_settings())


@lru_cache()
def get_lookup() -> PubChemLookup:
    return PubChemLookup()


@lru_cache()
def get_visualizer() -> ChemVisualizer:
    return ChemVisualizer()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.on_event("startup")
async def startup_event():
    settings = load_settings()
    configure_logging(settings.log_level)
    if settings.has_api_key:
        logger.info("[API] OPENAI_API_KEY is set, AI analysis enabled.")
    else:
        logger.warning("[API] OPENAI_API_KEY is not set, serving demo analyses.")


@app.get("/health", tags=["Status"])
async def health(analyzer: ChemistryAnalyzer = Depends(get_analyzer)) -> Dict[str, str]:
    return {"status": "ok", "mode": "demo" if analyzer.demo_mode else "ai"}


# Handlers are sync so the blocking completion call runs in the threadpool.
@app.post("/api/analyze-chemistry-text", response_model=AnalysisResult,
          response_model_exclude_none=True, tags=["Analysis"])
def analyze_chemistry_text(request: QuestionRequest,
                           analyzer: ChemistryAnalyzer = Depends(get_analyzer)):
    question = (request.question or "").strip()
    if not question:
        return _error(400, "No question provided")
    logger.info("[API /api/analyze-chemistry-text] Question: '%s'", question)
    return analyzer.analyze_question(question)


@app.post("/api/analyze-chemistry", response_model=AnalysisResult,
          response_model_exclude_none=True, tags=["Analysis"])
def analyze_chemistry_image(image: Optional[UploadFile] = File(None),
                            analyzer: ChemistryAnalyzer = Depends(get_analyzer)):
    if image is None:
        return _error(400, "No image provided")
    data = image.file.read(MAX_IMAGE_BYTES + 1)
    if not data:
        return _error(400, "No image provided")
    if len(data) > MAX_IMAGE_BYTES:
        logger.warning("[API /api/analyze-chemistry] Rejected oversized image '%s'", image.filename)
        return _error(400, IMAGE_TOO_LARGE)
    mime_type = image.content_type or DEFAULT_IMAGE_MIME
    if not mime_type.startswith("image/"):
        mime_type = DEFAULT_IMAGE_MIME
    logger.info("[API /api/analyze-chemistry] Image '%s' (%d bytes, %s)", image.filename, len(data), mime_type)
    return analyzer.analyze_image(data, mime_type)


@app.get("/api/compound", response_model=CompoundRecord, tags=["Compounds"])
def compound_lookup(name: str = Query(..., min_length=1),
                    lookup: PubChemLookup = Depends(get_lookup)):
    try:
        return lookup.lookup(name)
    except CompoundLookupError as e:
        logger.warning("[API /api/compound] %s for '%s' (%s)", e, name, e.reason)
        return _error(502, str(e))


@app.get("/api/structure.png", tags=["Compounds"],
         responses={200: {"content": {"image/png": {}}}})
def structure_png(smiles: str = Query(..., min_length=1),
                  visualizer: ChemVisualizer = Depends(get_visualizer)):
    try:
        png = visualizer.render_molecule(smiles)
    except StructureRenderError as e:
        return _error(422, str(e))
    return Response(content=png, media_type="image/png")


@app.get("/api/reaction.png", tags=["Compounds"],
         responses={200: {"content": {"image/png": {}}}})
def reaction_png(reactants: List[str] = Query(...), products: List[str] = Query(...),
                 visualizer: ChemVisualizer = Depends(get_visualizer)):
    try:
        png = visualizer.render_reaction(reactants, products)
    except StructureRenderError as e:
        return _error(422, str(e))
    return Response(content=png, media_type="image/png")


if __name__ == "__main__":
    print("Starting ChemSight API server with Uvicorn...")
    print("API docs (Swagger UI) available at: http://localhost:8000/docs")
    uvicorn.run("api_main:app", host="0.0.0.0", port=8000, reload=True)
