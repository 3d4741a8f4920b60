"""
MRONJ Risk Web Server

FastAPI-based local API for the MRONJ risk assessment. Stateless: every
request carries the full patient profile and nothing is stored.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

# Setup paths
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src import __version__
from src.config import get_settings
from src.engines import GuidanceCatalog, assess_risk, is_about_to_start
from src.exceptions import MronjError
from src.exporters import build_report_data, export_markdown
from src.models import (
    ChecklistItem,
    DentalProcedure,
    DrugName,
    PatientProfile,
    RiskAssessment,
    RiskLevel,
    TreatmentGuidance,
)

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title="MRONJ Risk",
    description="MRONJ Risk - Medication-Related Osteonecrosis of the Jaw Risk Assessment API",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

guidance_catalog = GuidanceCatalog()


# Response models
class AssessmentResponse(BaseModel):
    """Assessment result, or the pre-treatment checklist for patients about to start."""
    about_to_start: bool
    assessments: list[RiskAssessment] = Field(default_factory=list)
    checklist: list[ChecklistItem] = Field(default_factory=list)


class DrugInfo(BaseModel):
    """A drug known to the risk scorer."""
    name: str
    drug_class: str
    sub_type: str


@app.exception_handler(MronjError)
async def mronj_error_handler(request: Request, exc: MronjError):
    logger.warning("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.post("/api/assess", response_model=AssessmentResponse)
async def assess_patient(patient: PatientProfile):
    """
    Assess MRONJ risk for every dental procedure.

    Medications must already carry their computed duration.
    """
    if is_about_to_start(patient):
        return AssessmentResponse(
            about_to_start=True,
            checklist=guidance_catalog.get_pre_treatment_checklist(),
        )
    return AssessmentResponse(about_to_start=False, assessments=assess_risk(patient))


@app.post("/api/report")
async def patient_report(
    patient: PatientProfile,
    format: str = Query("markdown", pattern="^(markdown|json)$"),
):
    """
    Build the narrative report.

    Formats: markdown, json
    """
    if format == "json":
        return build_report_data(patient, catalog=guidance_catalog)
    return PlainTextResponse(
        export_markdown(patient, catalog=guidance_catalog),
        media_type="text/markdown",
    )


@app.get("/api/guidance/{procedure}/{risk_level}", response_model=TreatmentGuidance)
async def treatment_guidance(procedure: DentalProcedure, risk_level: RiskLevel):
    """Detailed treatment guidance for a procedure at a risk tier."""
    return guidance_catalog.get_treatment_guidance(procedure, risk_level)


@app.get("/api/checklist", response_model=list[ChecklistItem])
async def pre_treatment_checklist():
    """Dental checklist before starting antiresorptive therapy."""
    return guidance_catalog.get_pre_treatment_checklist()


@app.get("/api/drugs", response_model=list[DrugInfo])
async def list_drugs(drug_class: Optional[str] = Query(None, description="Filter by drug class")):
    """List the drugs recognised by the risk scorer."""
    drugs = [
        DrugInfo(name=d.value, drug_class=d.drug_class.value, sub_type=d.sub_type.value)
        for d in DrugName
    ]
    if drug_class:
        drugs = [d for d in drugs if d.drug_class == drug_class]
    if not drugs:
        raise HTTPException(status_code=404, detail=f"No drugs in class {drug_class}")
    return drugs


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the server."""
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


if __name__ == "__main__":
    run_server()
