"""FastAPI application main file"""
import logging
import os
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from foodledger.config import config, get_log_dir
from foodledger.database import init_db


def setup_logging():
    """Configure logging to a rotating file and the console"""
    log_file = os.path.join(get_log_dir(), config.LOG_FILE_NAME)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Rotating file handler
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=config.LOG_FILE_MAX_BYTES,
        backupCount=config.LOG_FILE_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setLevel(config.LOG_LEVEL)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.LOG_LEVEL)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Quieter third-party loggers
    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    logging.info(f"Logging initialised - log file: {log_file}")


setup_logging()

from foodledger.routers import reports  # noqa: E402

app = FastAPI(
    title=config.API_TITLE,
    description="Revenue, payouts and net profit reports for events catering, cloud kitchen and homemade orders",
    version=config.API_VERSION
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reports.router)


@app.on_event("startup")
async def startup_event():
    """Create tables on startup"""
    init_db()


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the report fetch pool"""
    from foodledger.utils.thread_pool import thread_pool_manager
    thread_pool_manager.shutdown_all(wait=False)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": f"{config.API_TITLE} API", "version": config.API_VERSION}


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}
