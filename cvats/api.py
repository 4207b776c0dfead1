import logging
import os
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .ats import RubricEvaluator, get_default_evaluator, get_evaluator
from .config import ALLOWED_ORIGINS, MAX_UPLOAD_BYTES, configure_logging
from .exceptions import (
    CorruptDocumentError,
    ExtractionError,
    SizeLimitExceededError,
    UnsupportedFormatError,
)
from .parser import extract_text
from .rubric import PRESETS

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="CV ATS Scorer API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

default_evaluator = get_default_evaluator()

ERROR_STATUS = {
    UnsupportedFormatError: 415,
    CorruptDocumentError: 422,
    SizeLimitExceededError: 413,
}


class AnalyzeRequest(BaseModel):
    text: str
    preset: Optional[str] = None


def _evaluator_for(preset: Optional[str]) -> RubricEvaluator:
    if not preset:
        return default_evaluator
    try:
        return get_evaluator(preset)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.warning(f"Rejected document on {request.url.path}: {exc}")
    return JSONResponse(content={"error": str(exc)}, status_code=status_code)


@app.post("/api/analyze")
async def analyze_endpoint(body: AnalyzeRequest):
    evaluator = _evaluator_for(body.preset)
    return JSONResponse(content=evaluator.analyze(body.text).to_dict())


@app.post("/api/upload")
async def upload_endpoint(file: UploadFile = File(...), preset: Optional[str] = Form(None)):
    evaluator = _evaluator_for(preset)
    filename = file.filename or ""
    contents = await file.read()

    format_hint = filename if os.path.splitext(filename)[1] else (file.content_type or filename)
    content = extract_text(contents, format_hint, max_bytes=MAX_UPLOAD_BYTES)
    logger.info(f"Extracted {len(content)} characters from {filename or 'upload'}")

    return JSONResponse(content={
        "fileName": filename,
        "content": content,
        "atsAnalysis": evaluator.analyze(content).to_dict(),
    })


@app.get("/api/rubrics")
async def rubrics():
    return {"default": default_evaluator.rubric.name, "presets": sorted(PRESETS)}


@app.get("/api/health")
async def health():
    return {"status": "ok", "rubric": default_evaluator.rubric.name}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
