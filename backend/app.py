"""
Recipe suggestion FastAPI application.

Endpoints:
    GET  /                  Health check
    POST /suggest-recipes   Ingredients -> ranked, enriched recipe suggestions
"""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List
import logging
import uuid
from dotenv import load_dotenv
from pathlib import Path

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

# Logger
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize App
app = FastAPI(title="Recipe Suggestion API")

from core.config import log_config
log_config()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from core.pipeline.orchestrator import InvalidRequestError, build_pipeline

pipeline = build_pipeline()


# --- Request/Response Models ---
class SuggestRecipesRequest(BaseModel):
    ingredients: List[str] = Field(default_factory=list)
    enableWebSearch: bool = False


# --- Endpoints ---

@app.get("/")
def health_check():
    return {"status": "ok", "service": "Recipe Suggestion API"}


@app.post("/suggest-recipes")
async def suggest_recipes(request: SuggestRecipesRequest):
    """
    Dataset match first; web search only when the dataset has nothing and the
    caller enabled it; video search always; one Wikipedia supplement for the
    top result; a single creative AI dish when every source came back empty.
    """
    request_id = uuid.uuid4().hex[:12]
    logger.info(
        "Suggest request_id=%s ingredients=%s web_search=%s",
        request_id, request.ingredients, request.enableWebSearch,
    )
    try:
        suggestions = await pipeline.suggest(
            request.ingredients,
            web_search_enabled=request.enableWebSearch,
            request_id=request_id,
        )
    except InvalidRequestError as e:
        logger.info("Suggest rejected request_id=%s reason=%s", request_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Suggest failed request_id=%s: %s", request_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to suggest recipes")
    return {"suggestions": [s.to_dict() for s in suggestions]}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
