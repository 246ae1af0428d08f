from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from verifyai.config import CORS_ORIGINS
from verifyai.logger import logger
from verifyai.routers.analysis import router as analysis_router

app = FastAPI(title="VerifyAI")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)

logger.info("VerifyAI API ready")
