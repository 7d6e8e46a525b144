from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import CORS_ORIGINS, LOG_LEVEL
from .routers import submissions, approvals, analytics
from .db import init_db

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Evaluation Records API")

# Initialize database
init_db()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(submissions.router, prefix="/submissions", tags=["Evaluation Records"])
app.include_router(approvals.router, prefix="/approvals", tags=["Approvals"])
app.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])

@app.get("/")
async def root():
    return {"message": "Welcome to the Evaluation Records API"}
