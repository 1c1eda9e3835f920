import os
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger

from dotenv import load_dotenv

from rowplan.agents.errors import GENERIC_FAILURE_MESSAGE, GenerationError
from rowplan.agents.scheduler import generate_workouts
from rowplan.export.csv_export import CSV_CONTENT_TYPE, csv_filename, workouts_to_csv
from rowplan.llm.openai_client import OpenAIClient
from rowplan.logger import setup_logger
from rowplan.models.schemas import (
    ErrorResponse,
    ExportCsvRequest,
    GenerateWorkoutsRequest,
    GenerateWorkoutsResponse,
    Intensity,
)

load_dotenv()
setup_logger()

PACKAGE_DIR = Path(__file__).parent
PRODUCTION = os.getenv("ROWPLAN_ENV", "development").lower() == "production"

app = FastAPI(title="RowPlan", version="1.0.0")

if not PRODUCTION:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


def get_llm_client() -> Optional[OpenAIClient]:
    # None: the gateway builds the client inside its own error handling.
    return None


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post(
    "/api/generate-workouts",
    response_model=GenerateWorkoutsResponse,
    responses={500: {"model": ErrorResponse}},
)
def generate_workouts_endpoint(
    request: GenerateWorkoutsRequest,
    client: Optional[OpenAIClient] = Depends(get_llm_client),
):
    """Generate a rowing workout schedule for the posted training periods.

    Request body
    - `{ periods: TrainingPeriod[] }` (may be empty). startDate and endDate must be
      YYYY-MM-DD dates; an empty or malformed date is rejected with a 422.

    Response
    - 200 `{ workouts: GeneratedWorkout[] }`
    - 500 `{ error: "Failed to generate workouts" }` on any generation failure.
    """
    try:
        workouts = generate_workouts(request.periods, client=client)
    except GenerationError as e:
        logger.opt(exception=e).error(f"Error generating workouts [{e.kind.value}]: {e}")
        for detail in e.details[:10]:
            logger.error(f"  - {detail}")
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE})
    return GenerateWorkoutsResponse(workouts=workouts)


@app.post("/api/export-csv")
def export_csv(request: ExportCsvRequest):
    """Return the posted workouts as a CSV file download."""
    filename = csv_filename()
    return Response(
        content=workouts_to_csv(request.workouts),
        media_type=CSV_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Serve the period editor."""
    return templates.TemplateResponse(request, "index.html", {"intensities": list(Intensity)})


def run(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    import uvicorn

    host = host or os.getenv("ROWPLAN_HOST", "0.0.0.0")
    port = port or int(os.getenv("ROWPLAN_PORT", "3000"))
    logger.info(f"Server running on http://localhost:{port}")
    uvicorn.run("rowplan.main:app", host=host, port=port, reload=reload and not PRODUCTION)


if __name__ == "__main__":
    run()
