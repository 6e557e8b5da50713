# api/main.py
"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.reports import router as reports_router
from api.schemas import HealthResponse
from pipeline import __version__

# Create FastAPI application
app = FastAPI(
    title="Case Study Reports API",
    description="""
Read-only REST API over the case-study report tables.

## Features

### Attendance
- Tardy, undertime and missing-logout counts by employee, department, weekday and month
- Overall summary with rates

### Invoices
- Settlement time per quarter (all or disputed only)
- Dispute outcomes, lost revenue by country and per-customer distribution
- Single-row analysis summary
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router)


@app.get("/", tags=["Health"])
def root():
    """API health check endpoint."""
    return {
        "status": "healthy",
        "message": "Case Study Reports API is running",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"], response_model=HealthResponse)
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": __version__,
        "endpoints": {
            "attendance": "/reports/attendance/{dimension}",
            "attendance_summary": "/reports/attendance/summary",
            "invoices": "/reports/invoices/summary",
            "docs": "/docs",
            "redoc": "/redoc"
        }
    }
