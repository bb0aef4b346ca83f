from contextlib import asynccontextmanager
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from config import Config
from constants import MINOR_UNITS_PER_UNIT
from errors import InvalidInputError
from money import format_minor_units
from simulation import SimulationResult, TaxDragSimulator
from utils import configure_logging


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class YearRow(BaseModel):
    year: int
    taxable_balance: str
    tax_advantaged_balance: str
    tax_drag_loss: str
    tax_paid: str


class SimulationSummary(BaseModel):
    years: int
    final_taxable_balance: str
    final_tax_advantaged_balance: str
    tax_drag_loss: str
    tax_drag_pct: float
    total_contributed: str
    total_tax_paid: str


class SimulationResponse(BaseModel):
    scenario: str
    summary: SimulationSummary
    rows: List[YearRow]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class SimulationRequest(BaseModel):
    config: Dict[str, Any] = Field(
        ...,
        description="Simulation configuration (same schema as the JSON config file).",
    )


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging("server.log")
    logger.info("Tax Drag Simulator API starting up")
    yield
    logger.info("Tax Drag Simulator API shutting down")


app = FastAPI(
    title="Tax Drag Simulator API",
    description="Compares taxable and tax-advantaged account growth year by year.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_simulator(raw_config: Dict[str, Any]) -> TaxDragSimulator:
    """Validates the request config; any input problem becomes a 422."""
    try:
        return TaxDragSimulator(Config(**raw_config))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid configuration: {e}")
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=f"Invalid input: {e}")


def _to_response(scenario: str, result: SimulationResult) -> Dict[str, Any]:
    return {
        "scenario": scenario,
        "summary": {
            "years": result.years,
            "final_taxable_balance": format_minor_units(result.final_taxable_balance),
            "final_tax_advantaged_balance": format_minor_units(
                result.final_tax_advantaged_balance
            ),
            "tax_drag_loss": format_minor_units(result.tax_drag_loss),
            "tax_drag_pct": float(result.tax_drag_pct),
            "total_contributed": format_minor_units(result.total_contributed),
            "total_tax_paid": format_minor_units(result.total_tax_paid),
        },
        "rows": [
            {
                "year": s.year,
                "taxable_balance": format_minor_units(s.taxable_balance),
                "tax_advantaged_balance": format_minor_units(s.tax_advantaged_balance),
                "tax_drag_loss": format_minor_units(s.tax_drag_loss),
                "tax_paid": format_minor_units(s.tax_paid),
            }
            for s in result.snapshots
        ],
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.post("/api/validate")
async def validate_config(body: SimulationRequest):
    """Validate a configuration without running the projection."""
    simulator = _build_simulator(body.config)
    return {"valid": True, "scenario": simulator.params_model.Nickname}


@app.post("/api/simulate", response_model=SimulationResponse)
async def simulate(body: SimulationRequest):
    """Run the projection and return every yearly row plus the summary."""
    simulator = _build_simulator(body.config)
    scenario = simulator.params_model.Nickname
    logger.info(f"Received simulation request for scenario '{scenario}'")

    result = simulator.run()
    logger.info(
        f"Simulation complete for '{scenario}': drag "
        f"{result.tax_drag_loss / MINOR_UNITS_PER_UNIT:,.2f} over {result.years} years"
    )
    return _to_response(scenario, result)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging("server.log")
    uvicorn.run("server:app", host="0.0.0.0", port=8080, reload=True)
