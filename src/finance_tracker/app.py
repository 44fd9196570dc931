import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from finance_tracker.api.routes import categories, categorize, insights, receipts
from finance_tracker.core import settings
from finance_tracker.integration.ocr import TesseractEngine
from finance_tracker.logger import get_logger, setup_logging
from finance_tracker.manager import CategorizerService
from finance_tracker.services.categorization import CategorizationPipeline
from finance_tracker.services.receipts import ReceiptService
from finance_tracker.storage.categories import CategoryRepository

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        repository = CategoryRepository(data_path=os.path.join(settings.DATA_DIR, "categories.json"))
        service = CategorizerService(
            repository=repository,
            cache_size=settings.CATEGORY_CACHE_SIZE,
            cache_prefix=settings.CATEGORY_CACHE_PREFIX,
            clear_cache_on_retrain=settings.CLEAR_CACHE_ON_RETRAIN,
        )
        service.initialize_default_categories()
        service.train()

        engine = TesseractEngine(
            lang=settings.OCR_LANG,
            timeout=settings.OCR_TIMEOUT_SECONDS,
            tesseract_cmd=settings.TESSERACT_CMD,
        )

        app.state.repository = repository
        app.state.service = service
        app.state.pipeline = CategorizationPipeline(service=service)
        app.state.receipts = ReceiptService(engine=engine)

        logger.info("Services initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Finance Tracker", lifespan=lifespan)

    app.include_router(categorize.router)
    app.include_router(categories.router)
    app.include_router(receipts.router)
    app.include_router(insights.router)

    return app
