"""FastAPI application for the Scrimmage Scheduler."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import engine, Base
from routers import scrimmages, export

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Scrimmage Scheduler",
    description="Fair round-robin scrimmage rounds: teammate rotation and sit-out balancing",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins in development
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(scrimmages.router, prefix="/api/scrimmages", tags=["scrimmages"])
app.include_router(export.router, prefix="/api/export", tags=["export"])


@app.get("/")
def root():
    return {"message": "Scrimmage Scheduler API", "docs": "/docs"}
